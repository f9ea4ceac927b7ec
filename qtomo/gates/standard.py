"""Standard gates as :class:`~qtomo.quobj.Operator` constants and a rotation builder.

The constants are created once at import. :class:`Operator` only hands out
copies of its data, so a shared gate cannot be modified in place by callers.
"""

from __future__ import annotations

import math
from typing import Sequence

import torch

from qtomo.quobj import DTYPE, Operator


def rotation(theta: float, n: Sequence[float] = (1, 0, 0)) -> Operator:
    """
    Qubit rotation by ``theta`` about the axis ``n``.

        R_n(θ) = exp(-iθ n·σ/2) = cos(θ/2) I - i sin(θ/2) (n_x X + n_y Y + n_z Z)

    Args:
        theta: Rotation angle in radians.
        n: Rotation axis. It is normalized, so ``(1, 1, 0)`` is accepted.

    Returns:
        A (2, 2) Operator with dims ``(2,)``, tagged non-Hermitian.

    Raises:
        ValueError: If ``n`` does not have three components or is the zero vector.
    """
    if len(n) != 3:
        raise ValueError(f"rotation axis must have 3 components, got {len(n)}")
    nx, ny, nz = (float(v) for v in n)
    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length == 0.0:
        raise ValueError("rotation axis must be non-zero")
    nx, ny, nz = nx / length, ny / length, nz / length

    c = math.cos(0.5 * theta)
    s = math.sin(0.5 * theta)
    matrix = torch.tensor(
        [
            [complex(c, -nz * s), complex(-ny * s, -nx * s)],
            [complex(ny * s, -nx * s), complex(c, nz * s)],
        ],
        dtype=DTYPE,
    )
    return Operator(matrix, (2,), hermitian=False)


_SQRT2_INV = 1.0 / math.sqrt(2.0)

# Hadamard
H = Operator(
    [[_SQRT2_INV, _SQRT2_INV], [_SQRT2_INV, -_SQRT2_INV]],
    (2,),
    hermitian=True,
)

# Phase gate (√Z)
S = Operator([[1.0, 0.0], [0.0, 1.0j]], (2,), hermitian=False)

# π/8 gate (√S)
T = Operator(
    [[1.0, 0.0], [0.0, complex(_SQRT2_INV, _SQRT2_INV)]],
    (2,),
    hermitian=False,
)

# Controlled-NOT, first qubit is the control
CNOT = Operator(
    [
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
        [0.0, 0.0, 1.0, 0.0],
    ],
    (2, 2),
    hermitian=True,
)

# NOT on the second qubit conditioned on the first being |0⟩
RCNOT = Operator(
    [
        [0.0, 1.0, 0.0, 0.0],
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ],
    (2, 2),
    hermitian=True,
)

# Controlled-Z
CZ = Operator(
    [
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, -1.0],
    ],
    (2, 2),
    hermitian=True,
)


def is_unitary(gate: Operator | torch.Tensor, atol: float = 1e-10) -> bool:
    """Return True if ``gate† gate = I`` within ``atol``."""
    matrix = gate.data if isinstance(gate, Operator) else gate
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    product = matrix.conj().transpose(0, 1) @ matrix
    identity = torch.eye(matrix.shape[0], dtype=product.dtype, device=product.device)
    return bool(torch.all(torch.abs(product - identity) < atol))
