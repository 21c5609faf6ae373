"""Single-qubit projective measurement with state collapse."""

from __future__ import annotations

import math
from typing import Optional

import torch

from ..backend.statevector import basis_indices, check_qubit, infer_n_qubits, probabilities
from ..logging import get_logger

logger = get_logger(__name__)


def _uniform(generator: Optional[torch.Generator]) -> float:
    return torch.rand(1, generator=generator, dtype=torch.float64).item()


def marginal_probability_zero(state: torch.Tensor, qubit: int) -> float:
    """
    Sum |amplitude|**2 over the basis states whose ``qubit`` bit is 0.

    Raises
    ------
    InvalidQubitIndex
        If qubit is outside the register.
    """
    n_qubits = infer_n_qubits(state)
    check_qubit(qubit, n_qubits)

    low = basis_indices(state.shape[0], qubit, 0, device=state.device)
    return float(probabilities(state)[low].sum().item())


def collapse(state: torch.Tensor, qubit: int, outcome: int) -> float:
    """
    Project ``state`` in place onto ``qubit == outcome`` and renormalize.

    Amplitudes inconsistent with the outcome are zeroed. The survivors are
    scaled by 1/sqrt(norm) where norm is their total probability. A zero
    norm can only arise from a degenerate draw; the zeros are then left as
    they are and a warning is logged.

    Returns
    -------
    float
        The pre-normalization probability mass of the surviving branch.
    """
    if outcome not in (0, 1):
        raise ValueError(f"outcome must be 0 or 1, got {outcome}")
    n_qubits = infer_n_qubits(state)
    check_qubit(qubit, n_qubits)

    dim = state.shape[0]
    rejected = basis_indices(dim, qubit, 1 - outcome, device=state.device)
    state[rejected] = 0

    norm = float(probabilities(state).sum().item())
    if norm > 0:
        state.mul_(1.0 / math.sqrt(norm))
    else:
        logger.warning(
            "collapse of qubit %d onto %d left a zero-norm state; "
            "skipping renormalization",
            qubit,
            outcome,
        )
    return norm


def measure_qubit(
    state: torch.Tensor,
    qubit: int,
    generator: Optional[torch.Generator] = None,
    readout_error: Optional[float] = None,
) -> int:
    """
    Measure one qubit in the computational basis and collapse ``state``.

    Parameters
    ----------
    state:
        1D complex state vector, modified in place.
    qubit:
        Qubit to measure.
    generator:
        Random source for the draw. Pass the owning circuit's generator so
        runs are reproducible and independent across circuits.
    readout_error:
        When given (noise enabled), prob0 is shifted by a uniform offset in
        [-readout_error, readout_error] and clamped to [0, 1] before the
        outcome is drawn.

    Returns
    -------
    int
        0 or 1.
    """
    prob0 = marginal_probability_zero(state, qubit)

    if readout_error is not None:
        offset = (2.0 * _uniform(generator) - 1.0) * readout_error
        prob0 = max(0.0, min(1.0, prob0 + offset))

    outcome = 0 if _uniform(generator) < prob0 else 1
    collapse(state, qubit, outcome)
    logger.debug("measured qubit %d -> %d (p0=%.6f)", qubit, outcome, prob0)
    return outcome


__all__ = ["marginal_probability_zero", "collapse", "measure_qubit"]
