"""Pytest configuration and shared fixtures for qacademy tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Small circuit and state helpers shared across test modules
"""

import os

import numpy as np
import pytest
import torch


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    Device is determined by default_device().

    Returns:
        A seeded torch.Generator instance.
    """
    from qacademy.core.device import default_device

    device = default_device().as_torch_device()
    generator = torch.Generator(device=device)
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function")
def random_state(rng: np.random.Generator):
    """Return a factory for random normalized complex128 state vectors."""

    def make(n_qubits: int) -> torch.Tensor:
        dim = 1 << n_qubits
        values = rng.normal(size=dim) + 1j * rng.normal(size=dim)
        values /= np.linalg.norm(values)
        return torch.tensor(values, dtype=torch.complex128)

    return make


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds(rng: np.random.Generator, torch_rng: torch.Generator) -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(_seed())
