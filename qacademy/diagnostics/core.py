"""Diagnostic checks for state vectors."""

from __future__ import annotations

import torch


def state_norm(state: torch.Tensor) -> torch.Tensor:
    """
    Compute the L2 norm of a state vector.

    Parameters
    ----------
    state:
        Complex tensor with shape (..., dim).

    Returns
    -------
    torch.Tensor
        Real tensor with shape (...) giving the norm for each batch element.

    Raises
    ------
    ValueError
        If state has fewer than 1 dimension.
    """
    if state.dim() < 1:
        raise ValueError("state_norm expects a tensor with at least 1 dimension.")

    norm_sq = (state.conj() * state).sum(dim=-1).real
    return torch.sqrt(norm_sq)


def assert_normalized(
    state: torch.Tensor,
    atol: float = 1e-9,
) -> None:
    """
    Assert that a state vector has norm ~1 within a tolerance.

    Raises
    ------
    ValueError
        If the norm is non-finite or differs from 1 by more than atol.
    """
    norms = state_norm(state)
    if not torch.all(torch.isfinite(norms)):
        raise ValueError("State norm contains non-finite values.")

    if not torch.allclose(norms, torch.ones_like(norms), atol=atol, rtol=0.0):
        raise ValueError(
            f"State is not normalized within tolerance {atol}. "
            f"Norms found: {norms.detach().cpu().tolist()}"
        )


def state_overlap_fidelity(
    state_a: torch.Tensor,
    state_b: torch.Tensor,
) -> torch.Tensor:
    """
    Return |<a|b>|^2 for two pure state vectors of the same shape.

    This is the exact overlap, unlike the heuristic ``Circuit.fidelity``
    metric, and is handy for comparing a noisy run against its ideal twin.
    """
    if state_a.shape != state_b.shape:
        raise ValueError("state_overlap_fidelity expects tensors with the same shape.")
    if state_a.dim() < 1:
        raise ValueError("state_overlap_fidelity expects at least 1D tensors.")

    inner = (state_a.conj() * state_b).sum(dim=-1)
    return inner.abs() ** 2
