"""Pytest configuration and shared fixtures for qtomo tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Reference tomography data for a single-qubit Z rotation by 180 degrees
"""

import os

import numpy as np
import pytest
import torch

from qtomo.tomography import single_qubit_likelihood_model

# Counts from a six-state, six-effect experiment on a Z-rotation by π.
# Rows are probe states, columns measurement effects, both in the order
# |+⟩, |−⟩, |+i⟩, |−i⟩, |1⟩, |0⟩.
Z_ROTATION_COUNTS = [
    [47, 736, 395, 358, 421, 383],
    [710, 107, 323, 468, 423, 315],
    [338, 428, 128, 646, 429, 338],
    [440, 359, 731, 46, 407, 408],
    [403, 340, 349, 400, 753, 36],
    [400, 391, 384, 408, 10, 755],
]
Z_ROTATION_SHOTS = 786


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture(scope="session")
def sensing_matrix() -> torch.Tensor:
    """Sensing matrix of the six-state single-qubit experiment (36 x 16)."""
    return single_qubit_likelihood_model()


@pytest.fixture(scope="session")
def z_rotation_frequencies() -> np.ndarray:
    """Normalized 6 x 6 frequency table of the Z-rotation experiment."""
    counts = np.asarray(Z_ROTATION_COUNTS, dtype=float)
    return counts / (6 * 3 * Z_ROTATION_SHOTS)


@pytest.fixture(scope="function")
def random_matrix(torch_rng: torch.Generator):
    """Factory for dense complex128 matrices with standard normal entries."""

    def make(n: int) -> torch.Tensor:
        real = torch.randn(n, n, dtype=torch.float64, generator=torch_rng)
        imag = torch.randn(n, n, dtype=torch.float64, generator=torch_rng)
        return torch.complex(real, imag)

    return make
