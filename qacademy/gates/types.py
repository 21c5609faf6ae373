"""Gate type tags and the immutable gate record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class GateType(str, Enum):
    """Supported gate kinds. Values are the wire tags."""

    HADAMARD = "H"
    PAULI_X = "X"
    PAULI_Y = "Y"
    PAULI_Z = "Z"
    PHASE = "S"
    T = "T"
    CNOT = "CNOT"
    SWAP = "SWAP"
    TOFFOLI = "CCX"
    MEASURE = "M"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_single_qubit(self) -> bool:
        return self not in (GateType.CNOT, GateType.SWAP, GateType.TOFFOLI)

    @property
    def n_controls(self) -> int:
        """Number of extra qubit operands (controls, or the SWAP partner)."""
        if self is GateType.TOFFOLI:
            return 2
        if self in (GateType.CNOT, GateType.SWAP):
            return 1
        return 0

    @classmethod
    def parse(cls, name: "GateType | str") -> "GateType":
        """
        Resolve a tag, enum name or common alias to a GateType.

        Matching is case-insensitive: "h", "Hadamard", "cx", "toffoli",
        "ccx" and "measure" are all accepted.

        Raises
        ------
        ValueError
            If the name is not recognised.
        """
        if isinstance(name, GateType):
            return name
        key = str(name).strip().upper().replace("-", "_").replace(" ", "_")
        for gate_type in cls:
            if key in (gate_type.value, gate_type.name):
                return gate_type
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(
            f"Unsupported gate name {name!r}. "
            f"Supported gates: {[g.value for g in cls]}."
        )


_DISPLAY_NAMES = {
    GateType.HADAMARD: "Hadamard",
    GateType.PAULI_X: "Pauli-X",
    GateType.PAULI_Y: "Pauli-Y",
    GateType.PAULI_Z: "Pauli-Z",
    GateType.PHASE: "Phase (S)",
    GateType.T: "T Gate",
    GateType.CNOT: "CNOT",
    GateType.SWAP: "SWAP",
    GateType.TOFFOLI: "Toffoli",
    GateType.MEASURE: "Measure",
}

_ALIASES = {
    "HADAMARD": GateType.HADAMARD,
    "NOT": GateType.PAULI_X,
    "CX": GateType.CNOT,
    "TOFFOLI": GateType.TOFFOLI,
    "MEASURE": GateType.MEASURE,
    "T_GATE": GateType.T,
}


@dataclass(frozen=True)
class Gate:
    """
    One gate application in a circuit.

    Attributes
    ----------
    type:
        The gate kind.
    target_qubit:
        Target qubit index. For SWAP, the first of the two swapped qubits.
    control_qubit:
        Control qubit for CNOT and the first control of Toffoli. For SWAP,
        the second swapped qubit.
    control_qubit2:
        Second Toffoli control.
    """

    type: GateType
    target_qubit: int
    control_qubit: Optional[int] = None
    control_qubit2: Optional[int] = None

    @property
    def qubits(self) -> Tuple[int, ...]:
        """All qubits the gate touches, target first."""
        qs = [self.target_qubit]
        if self.control_qubit is not None:
            qs.append(self.control_qubit)
        if self.control_qubit2 is not None:
            qs.append(self.control_qubit2)
        return tuple(qs)
