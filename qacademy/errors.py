"""Exception types raised by the simulator."""

from __future__ import annotations

from typing import Optional


class QAcademyError(Exception):
    """Base class for all qacademy errors."""


class InvalidQubitIndex(QAcademyError, ValueError):
    """A gate or measurement referenced a qubit outside the register.

    Also raised when one gate names the same qubit twice, since the
    resulting operation would not be a valid permutation of the register.

    Attributes
    ----------
    qubit:
        The offending qubit index.
    qubit_count:
        Size of the register the index was checked against.
    role:
        Which operand was invalid, e.g. ``"target"``, ``"control"``.
    """

    def __init__(
        self,
        qubit: int,
        qubit_count: int,
        role: str = "target",
        message: Optional[str] = None,
    ) -> None:
        self.qubit = qubit
        self.qubit_count = qubit_count
        self.role = role
        if message is None:
            message = (
                f"{role} qubit index {qubit} out of range [0, {qubit_count})"
            )
        super().__init__(message)


class CircuitBusyError(QAcademyError, RuntimeError):
    """The circuit was mutated or re-executed while executing."""


class ExecutionCancelled(QAcademyError, RuntimeError):
    """Execution was stopped by the caller's cancellation check.

    Attributes
    ----------
    gates_applied:
        Number of gate steps completed before the stop.
    """

    def __init__(self, gates_applied: int) -> None:
        self.gates_applied = gates_applied
        super().__init__(f"execution cancelled after {gates_applied} gate(s)")


__all__ = [
    "QAcademyError",
    "InvalidQubitIndex",
    "CircuitBusyError",
    "ExecutionCancelled",
]
