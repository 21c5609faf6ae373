"""Standard single-qubit gate matrices.

Matrices are indexed [out, in] in the |0⟩, |1⟩ basis. The diagonal gates
Z, S and T only act on the |1⟩ component; their phases are also exported
as plain Python complex numbers for the in-place phase kernel.
"""

from __future__ import annotations

import cmath
import math

import torch

Z_PHASE = complex(-1.0, 0.0)
S_PHASE = complex(0.0, 1.0)
T_PHASE = cmath.exp(1.0j * math.pi / 4.0)


def _matrix(
    rows: list,
    dtype: torch.dtype | None,
    device: torch.device | None,
) -> torch.Tensor:
    if dtype is None:
        dtype = torch.complex128
    if device is None:
        device = torch.device("cpu")
    return torch.tensor(rows, dtype=dtype, device=device)


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-X gate (bit flip)."""
    return _matrix([[0.0, 1.0], [1.0, 0.0]], dtype, device)


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    Pauli-Y gate.

    Maps |0⟩ -> i|1⟩ and |1⟩ -> -i|0⟩.
    """
    return _matrix([[0.0, -1.0j], [1.0j, 0.0]], dtype, device)


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Z gate (phase flip)."""
    return _matrix([[1.0, 0.0], [0.0, Z_PHASE]], dtype, device)


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Hadamard gate."""
    sqrt2_inv = 1.0 / math.sqrt(2.0)
    return _matrix([[sqrt2_inv, sqrt2_inv], [sqrt2_inv, -sqrt2_inv]], dtype, device)


def S(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """S gate (phase gate, √Z)."""
    return _matrix([[1.0, 0.0], [0.0, S_PHASE]], dtype, device)


def T(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """T gate (π/8 gate, √S)."""
    return _matrix([[1.0, 0.0], [0.0, T_PHASE]], dtype, device)


def is_unitary(matrix: torch.Tensor, atol: float = 1e-9) -> bool:
    """Check whether a square matrix U satisfies U U† = I within atol."""
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    eye = torch.eye(matrix.shape[0], dtype=matrix.dtype, device=matrix.device)
    product = matrix @ matrix.conj().transpose(-2, -1)
    return bool(torch.allclose(product, eye, atol=atol, rtol=0.0))


__all__ = ["X", "Y", "Z", "H", "S", "T", "Z_PHASE", "S_PHASE", "T_PHASE", "is_unitary"]
