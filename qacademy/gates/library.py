"""In-place gate kernels using bit-mask index arithmetic.

Every function here mutates ``state`` in place and also returns it. A
single-qubit gate on qubit q pairs each index i whose q-bit is 0 with
``i | (1 << q)`` and mixes the two amplitudes with the gate's 2x2 matrix.
Multi-qubit permutation gates (CNOT, SWAP, Toffoli) select the index set
to exchange with masks over the full 2**n range, each pair exactly once.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Tuple

import torch

from ..backend.statevector import basis_indices, check_qubit, infer_n_qubits
from ..diagnostics import debug_norm_tolerance, is_debug_enabled, state_norm
from ..errors import InvalidQubitIndex
from ..logging import get_logger
from . import standard as stdgates
from .types import Gate, GateType

logger = get_logger(__name__)


def _resolve_n_qubits(state: torch.Tensor, n_qubits: Optional[int]) -> int:
    inferred = infer_n_qubits(state)
    if n_qubits is not None and n_qubits != inferred:
        raise ValueError(
            f"state dimension {state.shape[0]} does not match 2**n_qubits = {1 << n_qubits}"
        )
    return inferred


def _check_distinct(qubits: Tuple[int, ...], n_qubits: int, roles: Tuple[str, ...]) -> None:
    for q, role in zip(qubits, roles):
        check_qubit(q, n_qubits, role=role)
    if len(set(qubits)) != len(qubits):
        raise InvalidQubitIndex(
            qubits[-1],
            n_qubits,
            role=roles[-1],
            message=f"gate qubits must be distinct, got {list(qubits)}",
        )


def _swap_indices(state: torch.Tensor, src: torch.Tensor, dst: torch.Tensor) -> None:
    # Advanced indexing returns a copy.
    held = state[src]
    state[src] = state[dst]
    state[dst] = held


class _NormGuard:
    """Debug-mode check that a kernel left the state norm unchanged."""

    def __init__(self, state: torch.Tensor, label: str) -> None:
        self.state = state
        self.label = label
        self.before = state_norm(state).item() if is_debug_enabled() else None

    def check(self) -> None:
        if self.before is None:
            return
        after = state_norm(self.state).item()
        atol = debug_norm_tolerance()
        if not math.isclose(after, self.before, rel_tol=0.0, abs_tol=atol):
            raise ValueError(
                f"{self.label} changed the state norm from {self.before} to {after}"
            )


def apply_single_qubit_matrix(
    state: torch.Tensor,
    matrix: torch.Tensor,
    qubit: int,
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """
    Apply an arbitrary 2x2 matrix to ``qubit`` in place.

    For each pair (a, b) = (state[i], state[i | 1 << qubit]):
    a' = m00*a + m01*b and b' = m10*a + m11*b.
    """
    if matrix.shape != (2, 2):
        raise ValueError(f"matrix must have shape (2, 2), got {tuple(matrix.shape)}")
    n_qubits = _resolve_n_qubits(state, n_qubits)
    check_qubit(qubit, n_qubits)

    guard = _NormGuard(state, "single-qubit gate")
    m = matrix.to(dtype=state.dtype, device=state.device)
    low = basis_indices(state.shape[0], qubit, 0, device=state.device)
    high = low | (1 << qubit)

    a = state[low]
    b = state[high]
    state[low] = m[0, 0] * a + m[0, 1] * b
    state[high] = m[1, 0] * a + m[1, 1] * b

    guard.check()
    return state


def apply_phase(
    state: torch.Tensor,
    qubit: int,
    phase: complex,
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """Multiply every amplitude whose ``qubit`` bit is 1 by ``phase``."""
    n_qubits = _resolve_n_qubits(state, n_qubits)
    check_qubit(qubit, n_qubits)

    guard = _NormGuard(state, "phase gate")
    high = basis_indices(state.shape[0], qubit, 1, device=state.device)
    state[high] = state[high] * phase
    guard.check()
    return state


def hadamard(state: torch.Tensor, qubit: int, n_qubits: Optional[int] = None) -> torch.Tensor:
    """(a, b) -> ((a + b)/√2, (a - b)/√2)."""
    return apply_single_qubit_matrix(
        state, stdgates.H(dtype=state.dtype, device=state.device), qubit, n_qubits
    )


def pauli_x(state: torch.Tensor, qubit: int, n_qubits: Optional[int] = None) -> torch.Tensor:
    """Swap each amplitude pair that differs only in ``qubit``."""
    n_qubits = _resolve_n_qubits(state, n_qubits)
    check_qubit(qubit, n_qubits)

    guard = _NormGuard(state, "Pauli-X")
    low = basis_indices(state.shape[0], qubit, 0, device=state.device)
    _swap_indices(state, low, low | (1 << qubit))
    guard.check()
    return state


def pauli_y(state: torch.Tensor, qubit: int, n_qubits: Optional[int] = None) -> torch.Tensor:
    """(a, b) -> (-i·b, i·a)."""
    return apply_single_qubit_matrix(
        state, stdgates.Y(dtype=state.dtype, device=state.device), qubit, n_qubits
    )


def pauli_z(state: torch.Tensor, qubit: int, n_qubits: Optional[int] = None) -> torch.Tensor:
    return apply_phase(state, qubit, stdgates.Z_PHASE, n_qubits)


def phase(state: torch.Tensor, qubit: int, n_qubits: Optional[int] = None) -> torch.Tensor:
    """S gate: multiply the |1⟩ component by i."""
    return apply_phase(state, qubit, stdgates.S_PHASE, n_qubits)


def t_gate(state: torch.Tensor, qubit: int, n_qubits: Optional[int] = None) -> torch.Tensor:
    """T gate: multiply the |1⟩ component by e^{iπ/4}."""
    return apply_phase(state, qubit, stdgates.T_PHASE, n_qubits)


def cnot(
    state: torch.Tensor,
    control: int,
    target: int,
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """
    Controlled-NOT.

    Every index with control bit 1 and target bit 0 is swapped with the
    index that has the target bit set. Selecting only target-bit-0 sources
    means each pair is exchanged exactly once.
    """
    n_qubits = _resolve_n_qubits(state, n_qubits)
    _check_distinct((target, control), n_qubits, ("target", "control"))

    guard = _NormGuard(state, "CNOT")
    control_mask = 1 << control
    target_mask = 1 << target
    idx = torch.arange(state.shape[0], device=state.device)
    src = idx[((idx & control_mask) != 0) & ((idx & target_mask) == 0)]
    _swap_indices(state, src, src | target_mask)
    guard.check()
    return state


def swap(
    state: torch.Tensor,
    qubit1: int,
    qubit2: int,
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """
    Exchange two qubits.

    Indices whose two bits differ are swapped with the index obtained by
    flipping both bits; the ``i < j`` filter keeps one copy of each pair.
    """
    n_qubits = _resolve_n_qubits(state, n_qubits)
    _check_distinct((qubit1, qubit2), n_qubits, ("target", "control"))

    guard = _NormGuard(state, "SWAP")
    mask1 = 1 << qubit1
    mask2 = 1 << qubit2
    idx = torch.arange(state.shape[0], device=state.device)
    differ = ((idx & mask1) != 0) != ((idx & mask2) != 0)
    partner = idx ^ mask1 ^ mask2
    keep = differ & (idx < partner)
    _swap_indices(state, idx[keep], partner[keep])
    guard.check()
    return state


def toffoli(
    state: torch.Tensor,
    control1: int,
    control2: int,
    target: int,
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """Doubly-controlled NOT: the CNOT swap pattern gated on both controls."""
    n_qubits = _resolve_n_qubits(state, n_qubits)
    _check_distinct(
        (target, control1, control2), n_qubits, ("target", "control", "control2")
    )

    guard = _NormGuard(state, "Toffoli")
    mask1 = 1 << control1
    mask2 = 1 << control2
    target_mask = 1 << target
    idx = torch.arange(state.shape[0], device=state.device)
    src = idx[
        ((idx & mask1) != 0) & ((idx & mask2) != 0) & ((idx & target_mask) == 0)
    ]
    _swap_indices(state, src, src | target_mask)
    guard.check()
    return state


_SINGLE_QUBIT: Dict[GateType, Callable[..., torch.Tensor]] = {
    GateType.HADAMARD: hadamard,
    GateType.PAULI_X: pauli_x,
    GateType.PAULI_Y: pauli_y,
    GateType.PAULI_Z: pauli_z,
    GateType.PHASE: phase,
    GateType.T: t_gate,
}


def apply_gate(
    state: torch.Tensor,
    gate: Gate,
    n_qubits: Optional[int] = None,
) -> torch.Tensor:
    """
    Apply a unitary Gate record to ``state`` in place.

    Raises
    ------
    ValueError
        For MEASURE gates (measurement is not unitary and is handled by the
        circuit) or for multi-qubit gates missing a control operand.
    """
    gate_type = gate.type
    logger.debug("apply %s on %s", gate_type.value, gate.qubits)

    if gate_type in _SINGLE_QUBIT:
        return _SINGLE_QUBIT[gate_type](state, gate.target_qubit, n_qubits)

    if gate_type is GateType.MEASURE:
        raise ValueError("MEASURE is not a unitary gate; use measure_qubit instead.")

    if gate.control_qubit is None:
        raise ValueError(f"{gate_type.display_name} gate requires control_qubit.")

    if gate_type is GateType.CNOT:
        return cnot(state, gate.control_qubit, gate.target_qubit, n_qubits)
    if gate_type is GateType.SWAP:
        return swap(state, gate.target_qubit, gate.control_qubit, n_qubits)

    if gate.control_qubit2 is None:
        raise ValueError("Toffoli gate requires control_qubit2.")
    return toffoli(
        state, gate.control_qubit, gate.control_qubit2, gate.target_qubit, n_qubits
    )


__all__ = [
    "apply_single_qubit_matrix",
    "apply_phase",
    "hadamard",
    "pauli_x",
    "pauli_y",
    "pauli_z",
    "phase",
    "t_gate",
    "cnot",
    "swap",
    "toffoli",
    "apply_gate",
]
