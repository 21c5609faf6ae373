"""Stochastic noise model.

The noise here is a per-gate heuristic tuned for teaching, applied to the
pure state vector directly rather than through Kraus channels.
"""

from .model import NoiseEvent, NoiseModel, NoiseType, OperationMode
from .stochastic import (
    FIDELITY_FLOOR,
    RELAXATION_DAMPING,
    Replenishment,
    apply_noise,
    apply_random_phase,
    apply_relaxation,
    decay_fidelity,
    replenish_atoms,
)

__all__ = [
    "OperationMode",
    "NoiseModel",
    "NoiseType",
    "NoiseEvent",
    "FIDELITY_FLOOR",
    "RELAXATION_DAMPING",
    "Replenishment",
    "apply_noise",
    "apply_random_phase",
    "apply_relaxation",
    "decay_fidelity",
    "replenish_atoms",
]
