"""Choi-matrix helpers: building process matrices and applying them to states.

Convention: a channel Φ on a d-dimensional system has the ``d² x d²`` Choi
matrix ``C = Σ_ij |i⟩⟨j| ⊗ Φ(|i⟩⟨j|)``; the first tensor factor is the
channel input and the second the output. Then

    Φ(ρ) = Tr_in[(ρᵀ ⊗ I) C]     and     Φ is trace preserving ⇔ Tr_out C = I.
"""

from __future__ import annotations

from typing import Sequence

import torch

from qtomo.diagnostics import is_hermitian
from qtomo.exceptions import DimensionError
from qtomo.quobj import (
    DTYPE,
    Ket,
    Operator,
    as_matrix,
    isqrt,
    partial_trace,
    qeye,
    tensor,
    vectorize,
)


def apply_process(choi: torch.Tensor | Operator, state: Ket | Operator | torch.Tensor) -> Operator:
    """
    Apply the channel described by ``choi`` to a state.

    Parameters
    ----------
    choi:
        ``d² x d²`` Choi matrix (tensor or Operator).
    state:
        Ket (converted to ``|ψ⟩⟨ψ|``), density Operator, or ``d x d`` tensor.

    Returns
    -------
    Operator
        ``Tr_in[(ρᵀ ⊗ I) C]`` with the dims of the input state. It is tagged
        Hermitian when the input state is tagged Hermitian and the Choi matrix
        is Hermitian.

    Raises
    ------
    DimensionError
        If the state dimension does not match the channel.
    """
    choi = as_matrix(choi)
    d = isqrt(choi.shape[0], what="Choi matrix side")

    if isinstance(state, Ket):
        rho = Operator.from_ket(state)
    elif isinstance(state, Operator):
        rho = state
    else:
        rho = Operator(state)
    if rho.shape[0] != d:
        raise DimensionError(
            f"state of dimension {rho.shape[0]} does not match a channel on dimension {d}"
        )

    flat_rho = Operator(rho.transpose()._data, (d,))
    lifted = tensor(flat_rho, qeye(d)) @ Operator(choi, (d, d))
    out = partial_trace(lifted, 0)
    hermitian = rho.is_hermitian and is_hermitian(choi)
    return Operator(out._data, rho.dims, hermitian=hermitian)


def choi_from_kraus(kraus_ops: Sequence[torch.Tensor | Operator]) -> torch.Tensor:
    """
    Choi matrix of the channel ``ρ ↦ Σ_k K_k ρ K_k†``.

    With column stacking, ``Σ_i |i⟩ ⊗ K|i⟩ = vec(K)``, so the Choi matrix is
    ``Σ_k vec(K_k) vec(K_k)†``.
    """
    if len(kraus_ops) == 0:
        raise ValueError("kraus_ops must contain at least one operator")
    mats = [as_matrix(k) for k in kraus_ops]
    shape = mats[0].shape
    for i, mat in enumerate(mats):
        if mat.dim() != 2 or mat.shape != shape or shape[0] != shape[1]:
            raise DimensionError(
                f"Kraus operator {i} must be square with shape {tuple(shape)}, got {tuple(mat.shape)}"
            )

    d = shape[0]
    choi = torch.zeros((d * d, d * d), dtype=DTYPE)
    for mat in mats:
        v = vectorize(mat)
        choi = choi + torch.outer(v, v.conj())
    return choi


def choi_from_unitary(unitary: torch.Tensor | Operator) -> torch.Tensor:
    """Choi matrix of the unitary channel ``ρ ↦ U ρ U†``."""
    return choi_from_kraus([unitary])


__all__ = ["apply_process", "choi_from_kraus", "choi_from_unitary"]
