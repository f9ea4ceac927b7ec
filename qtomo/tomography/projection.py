"""Projection of Choi matrices onto the CPTP set.

The CPTP set is the intersection of two convex sets in the space of
``d² x d²`` matrices:

- the CP cone of Hermitian positive semidefinite matrices, and
- the TP affine subspace ``Tr_out C = I``.

Projections onto each set are cheap (an eigenvalue clip and an affine map);
Dykstra's alternating projection combines them into the Frobenius-nearest
point of the intersection.

References:
    - Knee, Bolduc, Leach & Gauger, Phys. Rev. A 98, 062336 (2018)
    - Boyle & Dykstra, "A method for finding projections onto the
      intersection of convex sets in Hilbert spaces" (1986)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple

import torch

from qtomo.exceptions import ConvergenceError, DimensionError
from qtomo.logging import get_logger
from qtomo.quobj import DTYPE, isqrt, unvectorize, vectorize

logger = get_logger(__name__)


@lru_cache(maxsize=None)
def tp_helper_matrices(d: int) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Matrices encoding the linear constraint ``Tr_out C = I`` for dimension ``d``.

    Builds ``K = Σ_i I ⊗ e_iᵀ ⊗ I ⊗ e_iᵀ`` (shape ``d² x d⁴``), which maps
    ``vec(C)`` to ``vec(Tr_out C)``, and returns ``K† vec(I)`` and ``K† K``.
    Since ``K K† = d I`` the TP projection needs no matrix inverse.

    The result depends only on ``d`` and is cached; callers must not modify
    the returned tensors.
    """
    if d < 1:
        raise DimensionError(f"dimension must be positive, got {d}")
    identity = torch.eye(d, dtype=DTYPE)
    selector = torch.zeros((d * d, d ** 4), dtype=DTYPE)
    for i in range(d):
        row = torch.zeros((1, d), dtype=DTYPE)
        row[0, i] = 1.0
        selector = selector + torch.kron(torch.kron(identity, row), torch.kron(identity, row))
    adjoint = selector.conj().transpose(0, 1)
    return adjoint @ vectorize(identity), adjoint @ selector


def project_tp(
    vec_choi: torch.Tensor,
    helper_vec: torch.Tensor,
    helper_gram: torch.Tensor,
) -> torch.Tensor:
    """
    Project a vectorized Choi matrix onto the trace-preserving subspace.

        P_TP(v) = v - (K†K v) / d + (K† vec(I)) / d

    Args:
        vec_choi: Vectorized ``d² x d²`` matrix (length ``d⁴``).
        helper_vec: ``K† vec(I)`` from :func:`tp_helper_matrices`.
        helper_gram: ``K† K`` from :func:`tp_helper_matrices`.
    """
    d = isqrt(isqrt(vec_choi.shape[0]), what="Choi matrix side")
    return vec_choi - (helper_gram @ vec_choi) / d + helper_vec / d


def project_cp(vec_choi: torch.Tensor) -> torch.Tensor:
    """
    Project a vectorized matrix onto the positive semidefinite cone.

    The matrix is read as Hermitian from its upper triangle, its negative
    eigenvalues are set to zero and it is reassembled, which gives the
    Frobenius-nearest PSD matrix.
    """
    evals, evecs = torch.linalg.eigh(unvectorize(vec_choi), UPLO="U")
    evals = torch.clamp(evals, min=0.0)
    rebuilt = (evecs * evals.to(evecs.dtype)) @ evecs.conj().transpose(0, 1)
    return vectorize(rebuilt)


def project_cptp(
    choi: torch.Tensor,
    tol: float = 1e-4,
    max_iter: int = 10_000,
) -> torch.Tensor:
    """
    Frobenius-nearest CPTP Choi matrix via Dykstra's alternating projections.

    The iteration alternates :func:`project_tp` and :func:`project_cp` with
    correction terms ``p`` and ``q``, stopping once

        ‖x₁ − y₂‖² + ‖y₂ − x₂‖² + 2|⟨p, x₂ − x₁⟩| + 2|⟨q, y₂ − y₁⟩| <= tol

    where the inner products are taken against the previous iterates. The
    cross terms keep oscillating iterates from terminating early.

    Args:
        choi: ``d² x d²`` complex matrix, typically a gradient step away from
            a physical Choi matrix.
        tol: Threshold on the composite residual.
        max_iter: Cap on alternating rounds.

    Returns:
        The projected ``d² x d²`` matrix (positive semidefinite, trace
        preserving within the tolerance).

    Raises:
        DimensionError: If ``choi`` is not square with a perfect-square side.
        ConvergenceError: If ``max_iter`` rounds do not reach ``tol``.
    """
    choi = torch.as_tensor(choi, dtype=DTYPE)
    if choi.dim() != 2 or choi.shape[0] != choi.shape[1]:
        raise DimensionError(f"Choi matrix must be square, got shape {tuple(choi.shape)}")
    d = isqrt(choi.shape[0], what="Choi matrix side")
    helper_vec, helper_gram = tp_helper_matrices(d)

    x1 = vectorize(choi).clone()
    y1 = torch.zeros_like(x1)
    x2 = torch.zeros_like(x1)
    y2 = torch.zeros_like(x1)
    p = torch.zeros_like(x1)
    q = torch.zeros_like(x1)
    p_diff = 1.0
    q_diff = 1.0

    rounds = 0
    while True:
        residual = (
            p_diff ** 2
            + q_diff ** 2
            + 2.0 * abs(torch.vdot(p, x2 - x1).item())
            + 2.0 * abs(torch.vdot(q, y2 - y1).item())
        )
        if residual <= tol:
            break
        if rounds >= max_iter:
            raise ConvergenceError(
                f"CPTP projection did not converge in {max_iter} rounds "
                f"(residual {residual:.3e} > {tol:.1e})",
                iterations=rounds,
            )

        y2 = project_tp(x1 + p, helper_vec, helper_gram)
        p_diff = float(torch.linalg.vector_norm(x1 - y2))
        p = x1 - y2 + p
        x2 = project_cp(y2 + q)
        q_diff = float(torch.linalg.vector_norm(y2 - x2))
        q = y2 - x2 + q
        x1, x2 = x2, x1
        y1, y2 = y2, y1
        rounds += 1

    logger.debug("CPTP projection converged in %d rounds (residual %.3e)", rounds, residual)
    return unvectorize(x1)


__all__ = [
    "tp_helper_matrices",
    "project_tp",
    "project_cp",
    "project_cptp",
]
