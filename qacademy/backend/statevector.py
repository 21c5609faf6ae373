"""Dense state-vector storage and helpers.

A register of n qubits is a 1D complex tensor of length 2**n. The basis
index is little-endian: bit k of the index is the value of qubit k, so
qubit 0 is the least significant bit.
"""

from __future__ import annotations

import operator
from typing import Iterable, Tuple

import torch

from ..core.amplitude import Amplitude
from ..core.device import Device, resolve_device
from ..errors import InvalidQubitIndex

# Largest register for which a dense 2**n buffer is allocated.
MAX_DENSE_QUBITS = 30

# Basis states at or below this probability are left out of descriptions.
DESCRIPTION_CUTOFF = 0.001


def zero_state(
    n_qubits: int,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the |0...0⟩ state for n_qubits.

    Args:
        n_qubits: Number of qubits, 0 <= n_qubits <= MAX_DENSE_QUBITS.
        device: Device specification. Can be Device, str, torch.device, or None.
        dtype: Complex dtype. Defaults to the device's complex dtype
            (torch.complex128).

    Returns:
        A complex tensor of shape (2**n_qubits,) with 1+0j at index 0.

    Raises:
        ValueError: If n_qubits is negative or too large to allocate densely.
    """
    if n_qubits < 0:
        raise ValueError(f"n_qubits must be >= 0, got {n_qubits}")
    if n_qubits > MAX_DENSE_QUBITS:
        raise ValueError(
            f"n_qubits={n_qubits} exceeds the dense state-vector limit "
            f"of {MAX_DENSE_QUBITS} qubits"
        )

    qdevice = resolve_device(device)
    if dtype is None:
        dtype = qdevice.complex_dtype

    state = torch.zeros(1 << n_qubits, dtype=dtype, device=qdevice.as_torch_device())
    state[0] = 1.0 + 0.0j
    return state


def infer_n_qubits(state: torch.Tensor) -> int:
    """
    Infer n from a state vector of length 2**n.

    Raises:
        ValueError: If state is not 1D, not complex, or its length is not a
            power of 2.
    """
    if state.ndim != 1:
        raise ValueError("State vector must be a 1D tensor.")
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")

    dim = state.shape[0]
    if dim <= 0 or dim & (dim - 1) != 0:
        raise ValueError(f"State vector length must be a power of 2, got {dim}.")

    return int(dim).bit_length() - 1


def check_qubit(qubit: int, n_qubits: int, role: str = "target") -> int:
    """
    Return ``qubit`` as an int, raising InvalidQubitIndex unless
    0 <= qubit < n_qubits.

    Raises:
        TypeError: If qubit is not an integer (floats are rejected).
    """
    try:
        qubit = operator.index(qubit)
    except TypeError:
        raise TypeError(
            f"{role} qubit index must be an integer, got {type(qubit).__name__}"
        ) from None
    if qubit < 0 or qubit >= n_qubits:
        raise InvalidQubitIndex(qubit, n_qubits, role=role)
    return qubit


def basis_indices(
    dim: int,
    qubit: int,
    bit: int,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Return the basis indices in [0, dim) whose ``qubit`` bit equals ``bit``.

    For bit=0 these are the "low" halves of the (i, i | 1 << qubit) pairs a
    single-qubit gate mixes.
    """
    mask = 1 << qubit
    idx = torch.arange(dim, device=device)
    if bit:
        return idx[(idx & mask) != 0]
    return idx[(idx & mask) == 0]


def probabilities(state: torch.Tensor) -> torch.Tensor:
    """
    Return |amplitude|**2 for every basis state.

    The result is not renormalized; after relaxation damping the total can
    be below one.
    """
    return (state.real ** 2 + state.imag ** 2).contiguous()


def to_amplitudes(state: torch.Tensor) -> Tuple[Amplitude, ...]:
    """Snapshot a state tensor as a tuple of Amplitude values."""
    values = state.detach().cpu().tolist()
    return tuple(Amplitude.from_complex(v) for v in values)


def from_amplitudes(
    amplitudes: Iterable[Amplitude],
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """Build a state tensor from Amplitude values."""
    qdevice = resolve_device(device)
    if dtype is None:
        dtype = qdevice.complex_dtype

    values = [a.to_complex() for a in amplitudes]
    state = torch.tensor(values, dtype=dtype, device=qdevice.as_torch_device())
    infer_n_qubits(state)
    return state


def state_description(state: torch.Tensor, n_qubits: int | None = None) -> str:
    """
    Return a short ket-notation summary such as ``0.707|00⟩ + 0.707|11⟩``.

    Each term shows the real part of the amplitude (3 decimals) and the
    basis bitstring written most significant qubit first. Basis states with
    probability at or below DESCRIPTION_CUTOFF are omitted.
    """
    if n_qubits is None:
        n_qubits = infer_n_qubits(state)

    probs = probabilities(state).detach().cpu().tolist()
    reals = state.real.detach().cpu().tolist()

    parts = []
    for index, prob in enumerate(probs):
        if prob > DESCRIPTION_CUTOFF:
            bits = format(index, "b").zfill(n_qubits) if n_qubits else ""
            parts.append(f"{reals[index]:.3f}|{bits}⟩")

    if not parts:
        return "|" + "0" * n_qubits + "⟩"
    return " + ".join(parts)


__all__ = [
    "MAX_DENSE_QUBITS",
    "zero_state",
    "infer_n_qubits",
    "check_qubit",
    "basis_indices",
    "probabilities",
    "to_amplitudes",
    "from_amplitudes",
    "state_description",
]
