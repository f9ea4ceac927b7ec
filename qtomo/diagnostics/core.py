"""Physicality checks for density matrices and Choi process matrices."""

from __future__ import annotations

import torch

from qtomo.quobj import Operator, as_matrix, isqrt, partial_trace


def is_hermitian(
    mat: torch.Tensor | Operator,
    atol: float = 1e-8,
) -> bool:
    """
    Check whether a matrix equals its conjugate transpose.

    Unlike :attr:`Operator.is_hermitian`, which only reports the tag set at
    construction, this inspects the data.

    Parameters
    ----------
    mat:
        Square tensor or Operator.
    atol:
        Absolute tolerance on the largest entry of ``mat - mat†``.
    """
    mat = as_matrix(mat)
    if mat.dim() != 2 or mat.shape[0] != mat.shape[1]:
        return False
    max_dev = (mat - mat.conj().transpose(0, 1)).abs().max()
    if not torch.isfinite(max_dev):
        return False
    return bool(max_dev <= atol)


def min_eigenvalue(mat: torch.Tensor | Operator) -> float:
    """Smallest eigenvalue of the Hermitian part of ``mat``."""
    mat = as_matrix(mat)
    herm = 0.5 * (mat + mat.conj().transpose(0, 1))
    return float(torch.linalg.eigvalsh(herm)[0])


def is_psd(mat: torch.Tensor | Operator, atol: float = 1e-8) -> bool:
    """Hermitian with no eigenvalue below ``-atol``."""
    return is_hermitian(mat, atol=atol) and min_eigenvalue(mat) >= -atol


def tp_residual(choi: torch.Tensor | Operator) -> float:
    """
    Distance of a Choi matrix from the trace-preserving subspace.

    Returns the largest absolute entry of ``Tr_out(C) - I``, where the output
    is the second tensor factor of the ``d² x d²`` Choi matrix.
    """
    choi = as_matrix(choi)
    d = isqrt(choi.shape[0], what="Choi matrix side")
    reduced = partial_trace(Operator(choi, (d, d)), 1).data
    identity = torch.eye(d, dtype=reduced.dtype)
    return float((reduced - identity).abs().max())


def is_cptp_choi(choi: torch.Tensor | Operator, atol: float = 1e-6) -> bool:
    """True if ``choi`` is positive semidefinite and trace preserving within ``atol``."""
    return is_psd(choi, atol=atol) and tp_residual(choi) <= atol


def assert_cptp_choi(choi: torch.Tensor | Operator, atol: float = 1e-6) -> None:
    """
    Raise unless ``choi`` describes a physical (CPTP) channel.

    Raises
    ------
    ValueError
        Naming the first violated condition.
    """
    if not is_hermitian(choi, atol=atol):
        raise ValueError(f"Choi matrix is not Hermitian within tolerance {atol}.")
    lowest = min_eigenvalue(choi)
    if lowest < -atol:
        raise ValueError(
            f"Choi matrix is not positive semidefinite: smallest eigenvalue {lowest:.3e}."
        )
    residual = tp_residual(choi)
    if residual > atol:
        raise ValueError(
            f"Choi matrix is not trace preserving: |Tr_out C - I| = {residual:.3e}."
        )


__all__ = [
    "is_hermitian",
    "min_eigenvalue",
    "is_psd",
    "tp_residual",
    "is_cptp_choi",
    "assert_cptp_choi",
]
