"""Gate definitions and the in-place gate library."""

from . import standard
from .library import (
    apply_gate,
    apply_phase,
    apply_single_qubit_matrix,
    cnot,
    hadamard,
    pauli_x,
    pauli_y,
    pauli_z,
    phase,
    swap,
    t_gate,
    toffoli,
)
from .types import Gate, GateType

__all__ = [
    "standard",
    "Gate",
    "GateType",
    "apply_gate",
    "apply_phase",
    "apply_single_qubit_matrix",
    "hadamard",
    "pauli_x",
    "pauli_y",
    "pauli_z",
    "phase",
    "t_gate",
    "cnot",
    "swap",
    "toffoli",
]
