"""Per-gate stochastic noise and fidelity bookkeeping.

This is a teaching approximation, not a channel simulation: each executed
gate may trigger a random phase kick or an amplitude damping of its target
qubit, and a scalar fidelity estimate decays multiplicatively. Relaxation
damping is not renormalized, so the state's total probability drifts below
one the way an unmonitored T1 loss would.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import torch

from ..backend.statevector import basis_indices, check_qubit, infer_n_qubits
from ..logging import get_logger
from .model import NoiseEvent, NoiseModel, NoiseType

logger = get_logger(__name__)

FIDELITY_FLOOR = 0.5
RELAXATION_DAMPING = 0.99
REPLENISHMENT_FIDELITY_BOOST = 1.02
REPLENISHMENT_COHERENCE_GAIN = 0.1


def _uniform(generator: Optional[torch.Generator]) -> float:
    return torch.rand(1, generator=generator, dtype=torch.float64).item()


def apply_random_phase(state: torch.Tensor, qubit: int, angle: float) -> torch.Tensor:
    """Rotate every amplitude whose ``qubit`` bit is 1 by e^{i·angle}, in place."""
    high = basis_indices(state.shape[0], qubit, 1, device=state.device)
    state[high] = state[high] * complex(math.cos(angle), math.sin(angle))
    return state


def apply_relaxation(
    state: torch.Tensor,
    qubit: int,
    damping: float = RELAXATION_DAMPING,
) -> torch.Tensor:
    """Scale every amplitude whose ``qubit`` bit is 1 by ``damping``, in place."""
    high = basis_indices(state.shape[0], qubit, 1, device=state.device)
    state[high] = state[high] * damping
    return state


def apply_noise(
    state: torch.Tensor,
    qubit: int,
    model: NoiseModel,
    generator: Optional[torch.Generator] = None,
) -> List[NoiseEvent]:
    """
    Run one round of post-gate noise on ``qubit``.

    Three independent draws are made in a fixed order so seeded runs are
    reproducible: dephasing (random phase on the |1⟩ branch), relaxation
    (damping of the |1⟩ branch), then atom loss, which is only logged and
    left for replenishment bookkeeping.

    Returns
    -------
    list of NoiseEvent
        The events triggered this round, in draw order.
    """
    check_qubit(qubit, infer_n_qubits(state))
    events: List[NoiseEvent] = []

    if _uniform(generator) < model.dephasing_rate:
        events.append(NoiseEvent(qubit, NoiseType.DEPHASING, model.dephasing_rate))
        apply_random_phase(state, qubit, 2.0 * math.pi * _uniform(generator))

    if _uniform(generator) < model.relaxation_rate:
        events.append(NoiseEvent(qubit, NoiseType.RELAXATION, model.relaxation_rate))
        apply_relaxation(state, qubit)

    if _uniform(generator) < model.atom_loss_rate:
        events.append(NoiseEvent(qubit, NoiseType.ATOM_LOSS, model.atom_loss_rate))

    for event in events:
        logger.debug("noise %s on qubit %d", event.type.value, qubit)
    return events


def decay_fidelity(fidelity: float, model: NoiseModel) -> float:
    """
    One gate's worth of fidelity decay, floored at FIDELITY_FLOOR.

    fidelity * (1 - gate_error_rate) * continuous_operation_correction
    """
    decayed = fidelity * (1.0 - model.gate_error_rate)
    decayed *= model.continuous_operation_correction
    return max(FIDELITY_FLOOR, decayed)


@dataclass(frozen=True)
class Replenishment:
    """Outcome of one atom-replenishment check."""

    replenished: int
    fidelity: float
    coherence_time: float
    triggered: bool


def replenish_atoms(
    atom_losses: int,
    replenished: int,
    fidelity: float,
    coherence_time: float,
) -> Replenishment:
    """
    Reload lost atoms if any loss has not been replenished yet.

    When ``atom_losses`` exceeds ``replenished``, the counter catches up to
    the loss count, fidelity recovers by REPLENISHMENT_FIDELITY_BOOST
    (capped at 1.0) and coherence time grows by
    REPLENISHMENT_COHERENCE_GAIN seconds.
    """
    if atom_losses <= replenished:
        return Replenishment(replenished, fidelity, coherence_time, False)

    logger.debug("replenishing atoms: %d -> %d", replenished, atom_losses)
    return Replenishment(
        replenished=atom_losses,
        fidelity=min(1.0, fidelity * REPLENISHMENT_FIDELITY_BOOST),
        coherence_time=coherence_time + REPLENISHMENT_COHERENCE_GAIN,
        triggered=True,
    )


__all__ = [
    "FIDELITY_FLOOR",
    "RELAXATION_DAMPING",
    "REPLENISHMENT_FIDELITY_BOOST",
    "REPLENISHMENT_COHERENCE_GAIN",
    "apply_random_phase",
    "apply_relaxation",
    "apply_noise",
    "decay_fidelity",
    "Replenishment",
    "replenish_atoms",
]
