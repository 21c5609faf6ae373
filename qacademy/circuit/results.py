"""Immutable records produced by circuit execution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

import torch

from ..gates.types import Gate
from ..noise.model import NoiseEvent


class CircuitStatus(str, Enum):
    IDLE = "idle"
    EXECUTING = "executing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class StepSnapshot:
    """
    State published to an observer after one gate step.

    ``probabilities`` is a detached copy; mutating it does not affect the
    circuit.
    """

    index: int
    gate: Gate
    fidelity: float
    probabilities: torch.Tensor
    noise_events: Tuple[NoiseEvent, ...]
    syndromes: int = 0


@dataclass(frozen=True)
class ExecutionResult:
    """
    Snapshot of a circuit after ``execute()`` finished.

    Attributes
    ----------
    state:
        Clone of the final state vector.
    probabilities:
        |amplitude|**2 of ``state`` (not renormalized).
    measurement_results:
        Read-only mapping qubit -> measured bit.
    fidelity:
        Heuristic fidelity estimate in [0.5, 1.0].
    atom_replenishment_count:
        Atom-loss events that were replenished.
    coherence_time:
        Coherence time gained through replenishment, in seconds.
    noise_events:
        Every noise event logged during the run, in order.
    execution_time:
        Wall-clock seconds spent in ``execute()``.
    gates_applied:
        Number of gate steps executed.
    """

    state: torch.Tensor
    probabilities: torch.Tensor
    measurement_results: Mapping[int, int]
    fidelity: float
    atom_replenishment_count: int
    coherence_time: float
    noise_events: Tuple[NoiseEvent, ...]
    execution_time: float
    gates_applied: int

    def __post_init__(self) -> None:
        if not isinstance(self.measurement_results, MappingProxyType):
            object.__setattr__(
                self,
                "measurement_results",
                MappingProxyType(dict(self.measurement_results)),
            )

    @property
    def n_qubits(self) -> int:
        return int(self.state.shape[0]).bit_length() - 1
