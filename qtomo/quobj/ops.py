"""Tensor-product algebra on quantum objects and on raw square matrices.

Conventions
-----------
- Tensor products follow :func:`torch.kron`: the first operand occupies the
  most-significant block, so ``dims`` of the result are the operands' dims
  concatenated in order.
- Vectorization stacks columns (column-major order), so for a ``d x d``
  matrix ``X`` entry ``X[i, j]`` lands at index ``i + d * j``.
"""

from __future__ import annotations

import math
from typing import Sequence

import torch

from qtomo.exceptions import DimensionError

from .core import DTYPE, Bra, Ket, Operator, QuObject


def isqrt(n: int, what: str = "length") -> int:
    """Exact integer square root of ``n``, raising if ``n`` is not a square."""
    root = math.isqrt(n)
    if root * root != n:
        raise DimensionError(f"{what} {n} is not a perfect square")
    return root


def dims_match(a: QuObject, b: QuObject) -> None:
    """Raise :class:`DimensionError` unless ``a`` and ``b`` share ``dims``."""
    if a.dims != b.dims:
        raise DimensionError(f"subspace dimensions do not match: {a.dims} vs {b.dims}")


def qeye(dims: Sequence[int] | int) -> Operator:
    """Identity operator on the space described by ``dims``."""
    return Operator.identity(dims)


def tensor(first: QuObject, second: QuObject, *more: QuObject) -> QuObject:
    """
    Tensor (Kronecker) product of quantum objects of the same variant.

    Parameters
    ----------
    first, second, *more:
        Kets, Bras or Operators; all operands must be of the same variant.

    Returns
    -------
    QuObject
        Object of the same variant with ``dims`` equal to the concatenation
        of the operands' dims. Operators keep the Hermitian tag only if every
        factor is tagged.

    Raises
    ------
    TypeError
        If the operands mix variants.
    """
    operands = (first, second) + more
    kind = type(first)
    for operand in operands:
        if type(operand) is not kind:
            raise TypeError(
                f"cannot tensor {kind.__name__} with {type(operand).__name__}"
            )

    data = first._data
    dims = first.dims
    for operand in operands[1:]:
        data = torch.kron(data, operand._data)
        dims = dims + operand.dims

    if kind is Operator:
        hermitian = all(op.is_hermitian for op in operands)
        return Operator(data, dims, hermitian=hermitian)
    return kind(data, dims)


def partial_trace(op: Operator, index: int) -> Operator:
    """
    Trace out subsystem ``index`` (0-based) of a composite operator.

    Parameters
    ----------
    op:
        Operator whose ``dims`` name at least two subsystems.
    index:
        Subsystem to contract.

    Returns
    -------
    Operator
        Operator on the remaining subsystems, in their original order.

    Raises
    ------
    TypeError
        If ``op`` is not an :class:`Operator`.
    DimensionError
        If ``index`` is out of range or ``op`` has a single subsystem.
    """
    if not isinstance(op, Operator):
        raise TypeError(f"partial_trace is defined for Operators, got {type(op).__name__}")
    n_sub = len(op.dims)
    if not 0 <= index < n_sub:
        raise DimensionError(
            f"subsystem index {index} out of range for dims {op.dims}"
        )
    if n_sub == 1:
        raise DimensionError("cannot trace out the only subsystem of an operator")

    reshaped = op._data.reshape(op.dims + op.dims)
    # diagonal() drops both axes and appends the diagonal as the last axis
    traced = torch.diagonal(reshaped, dim1=index, dim2=index + n_sub).sum(dim=-1)
    remaining = op.dims[:index] + op.dims[index + 1:]
    size = math.prod(remaining)
    return Operator(traced.reshape(size, size), remaining, hermitian=op.is_hermitian)


def vectorize(matrix: torch.Tensor | Operator) -> torch.Tensor:
    """Stack the columns of a square matrix into a vector of length ``d**2``."""
    if isinstance(matrix, Operator):
        matrix = matrix._data
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        raise DimensionError(f"can only vectorize square matrices, got shape {tuple(matrix.shape)}")
    return matrix.transpose(0, 1).reshape(-1)


def unvectorize(vec: torch.Tensor, d: int | None = None) -> torch.Tensor:
    """Inverse of :func:`vectorize`: rebuild the ``d x d`` matrix from its columns."""
    if vec.dim() != 1:
        raise DimensionError(f"expected a 1-D vector, got shape {tuple(vec.shape)}")
    side = isqrt(vec.shape[0])
    if d is not None and d != side:
        raise DimensionError(f"vector of length {vec.shape[0]} cannot form a {d}x{d} matrix")
    return vec.reshape(side, side).transpose(0, 1).contiguous()


def normalize(obj: QuObject) -> QuObject:
    """
    Normalize a quantum object.

    Kets and Bras are scaled to unit 2-norm; Operators are scaled to unit
    trace, which turns an unnormalized projector into a density matrix.

    Raises
    ------
    ValueError
        If the norm (or trace) is zero.
    """
    if isinstance(obj, (Ket, Bra)):
        norm = obj.norm()
        if norm == 0.0:
            raise ValueError("cannot normalize a zero-norm vector")
        return obj / norm
    if isinstance(obj, Operator):
        trace = obj.trace()
        if trace == 0:
            raise ValueError("cannot trace-normalize an operator with zero trace")
        # A real trace keeps the Hermitian tag
        if trace.imag == 0:
            return obj / trace.real
        return obj / trace
    raise TypeError(f"cannot normalize {type(obj).__name__}")


def as_matrix(obj: torch.Tensor | Operator) -> torch.Tensor:
    """Return the complex128 matrix behind ``obj`` without copying tensors."""
    if isinstance(obj, Operator):
        return obj._data
    return torch.as_tensor(obj, dtype=DTYPE)


__all__ = [
    "isqrt",
    "dims_match",
    "qeye",
    "tensor",
    "partial_trace",
    "vectorize",
    "unvectorize",
    "normalize",
    "as_matrix",
]
