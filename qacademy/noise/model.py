"""Noise configuration: operation modes, noise parameters and noise events."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class OperationMode(str, Enum):
    """
    How much of the hardware model a circuit runs with.

    STANDARD is the ideal textbook simulator. CONTINUOUS adds per-gate
    noise and atom replenishment, modelling a neutral-atom array kept
    running by reloading lost atoms. FAULT_TOLERANT also runs the
    configured error-correction layers after every gate.
    """

    STANDARD = "Standard"
    CONTINUOUS = "Continuous"
    FAULT_TOLERANT = "Fault-Tolerant"

    @property
    def max_qubits(self) -> int:
        return _MAX_QUBITS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def noise_enabled(self) -> bool:
        return self is not OperationMode.STANDARD

    @property
    def replenishes_atoms(self) -> bool:
        return self in (OperationMode.CONTINUOUS, OperationMode.FAULT_TOLERANT)

    @property
    def corrects_errors(self) -> bool:
        return self is OperationMode.FAULT_TOLERANT

    @classmethod
    def parse(cls, value: "OperationMode | str") -> "OperationMode":
        """Resolve a wire tag, legacy tag or enum name, case-insensitively."""
        if isinstance(value, OperationMode):
            return value
        key = str(value).strip()
        for mode in cls:
            if key.lower() in (mode.value.lower(), mode.name.lower()):
                return mode
        if key.lower() in _MODE_ALIASES:
            return _MODE_ALIASES[key.lower()]
        raise ValueError(
            f"Unknown operation mode {value!r}. "
            f"Supported modes: {[m.value for m in cls]}."
        )


_MAX_QUBITS = {
    OperationMode.STANDARD: 8,
    OperationMode.CONTINUOUS: 64,
    OperationMode.FAULT_TOLERANT: 256,
}

# Tags written by earlier releases of the app.
_MODE_ALIASES = {
    "continuous (harvard-mit)": OperationMode.CONTINUOUS,
}

_DESCRIPTIONS = {
    OperationMode.STANDARD: "Basic quantum simulation",
    OperationMode.CONTINUOUS: (
        "Continuous operation with conveyor-belt atom replenishment"
    ),
    OperationMode.FAULT_TOLERANT: (
        "Fault-tolerant architecture with error correction layers"
    ),
}


def _check_rate(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}")


@dataclass(frozen=True)
class NoiseModel:
    """
    Per-gate stochastic noise parameters.

    Every rate is a probability per executed gate, except
    ``measurement_error`` (the half-width of the readout offset on prob0)
    and ``continuous_operation_correction`` (a multiplicative fidelity
    factor applied each gate).
    """

    dephasing_rate: float = 0.001
    relaxation_rate: float = 0.002
    gate_error_rate: float = 0.0005
    measurement_error: float = 0.01
    atom_loss_rate: float = 0.0001
    continuous_operation_correction: float = 0.95

    def __post_init__(self) -> None:
        _check_rate("dephasing_rate", self.dephasing_rate)
        _check_rate("relaxation_rate", self.relaxation_rate)
        _check_rate("gate_error_rate", self.gate_error_rate)
        _check_rate("measurement_error", self.measurement_error)
        _check_rate("atom_loss_rate", self.atom_loss_rate)
        if not 0.0 < self.continuous_operation_correction <= 1.0:
            raise ValueError(
                "continuous_operation_correction must be in (0, 1], "
                f"got {self.continuous_operation_correction}"
            )

    @classmethod
    def ideal(cls) -> "NoiseModel":
        """No stochastic noise. The correction factor stays at its default."""
        return cls(
            dephasing_rate=0.0,
            relaxation_rate=0.0,
            gate_error_rate=0.0,
            measurement_error=0.0,
            atom_loss_rate=0.0,
        )

    @classmethod
    def neutral_atom_array(cls) -> "NoiseModel":
        """Parameters of a continuously reloaded neutral-atom array."""
        return cls(
            dephasing_rate=0.0005,
            relaxation_rate=0.001,
            gate_error_rate=0.0001,
            measurement_error=0.005,
            atom_loss_rate=0.00005,
            continuous_operation_correction=0.98,
        )

    @classmethod
    def realistic(cls) -> "NoiseModel":
        return cls()

    @classmethod
    def for_mode(cls, mode: OperationMode) -> "NoiseModel":
        """Default noise model for an operation mode."""
        if mode is OperationMode.STANDARD:
            return cls.ideal()
        return cls.neutral_atom_array()

    def to_dict(self) -> Dict[str, float]:
        return {
            "dephasing_rate": self.dephasing_rate,
            "relaxation_rate": self.relaxation_rate,
            "gate_error_rate": self.gate_error_rate,
            "measurement_error": self.measurement_error,
            "atom_loss_rate": self.atom_loss_rate,
            "continuous_operation_correction": self.continuous_operation_correction,
        }


class NoiseType(str, Enum):
    """Kinds of logged noise events. Values are the wire tags."""

    DEPHASING = "dephasing"
    RELAXATION = "relaxation"
    GATE_ERROR = "gateError"
    ATOM_LOSS = "atomLoss"
    MEASUREMENT_ERROR = "measurementError"


@dataclass(frozen=True)
class NoiseEvent:
    """One logged noise occurrence on a qubit."""

    qubit: int
    type: NoiseType
    magnitude: float
    timestamp: float = field(default_factory=time.time)


__all__ = ["OperationMode", "NoiseModel", "NoiseType", "NoiseEvent"]
