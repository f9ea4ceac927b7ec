"""Quantum objects: kets, bras and operators tagged with subspace dimensions."""

from __future__ import annotations

import math
import numbers
from typing import Sequence, Tuple

import torch

from qtomo.exceptions import DimensionError

DTYPE = torch.complex128


def _as_dims(dims: Sequence[int] | int | None, size: int) -> Tuple[int, ...]:
    """Validate ``dims`` against a Hilbert-space dimension ``size``."""
    if dims is None:
        return (size,)
    if isinstance(dims, numbers.Integral):
        dims = (int(dims),)
    dims = tuple(int(d) for d in dims)
    if len(dims) == 0 or any(d < 1 for d in dims):
        raise DimensionError(f"dims must be a non-empty tuple of positive integers, got {dims}")
    if math.prod(dims) != size:
        raise DimensionError(
            f"dims {dims} describe a space of dimension {math.prod(dims)}, "
            f"but the data has dimension {size}"
        )
    return dims


def _to_tensor(data) -> torch.Tensor:
    """Private complex128 copy of ``data`` with conjugation materialized."""
    return torch.as_tensor(data, dtype=DTYPE).resolve_conj().contiguous().clone()


def _check_scalar(value: object) -> complex:
    if isinstance(value, torch.Tensor):
        if value.numel() != 1:
            raise TypeError("quantum objects can only be scaled by scalars")
        return complex(value.item())
    if not isinstance(value, numbers.Number):
        raise TypeError(f"cannot scale a quantum object by {type(value).__name__}")
    return complex(value)


class QuObject:
    """
    Base class pairing a complex128 tensor with tensor-product dimensions.

    The stored tensor is private. :attr:`data` returns a copy, so a quantum
    object cannot be mutated in place by its users; every operation builds a
    new object.

    Attributes
    ----------
    dims: Tuple[int, ...]
        Dimensions of the subsystems; their product is the dimension of the
        full Hilbert space.
    """

    def __init__(self, data: torch.Tensor, dims: Tuple[int, ...]) -> None:
        self._data = data
        self._dims = dims

    # ------------------------------------------------------------------
    # Accessors

    @property
    def data(self) -> torch.Tensor:
        """Copy of the underlying complex128 tensor."""
        return self._data.clone()

    @property
    def dims(self) -> Tuple[int, ...]:
        return self._dims

    @property
    def shape(self) -> torch.Size:
        return self._data.shape

    def __len__(self) -> int:
        return self._data.numel()

    def __getitem__(self, index):
        return self._data[index].clone()

    def norm(self) -> float:
        """Frobenius (2-) norm of the data."""
        return float(torch.linalg.norm(self._data))

    def copy(self):
        return self._new(self._data.clone())

    def _new(self, data: torch.Tensor, **kwargs):
        """Build an object of the same variant and dims around ``data``."""
        return type(self)(data, self._dims)

    def _check_same(self, other: QuObject) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"operation between {type(self).__name__} and {type(other).__name__} is undefined"
            )
        if other.dims != self.dims:
            raise DimensionError(
                f"subspace dimensions do not match: {self.dims} vs {other.dims}"
            )

    # ------------------------------------------------------------------
    # Algebra

    def tensor(self, other: QuObject) -> QuObject:
        """Tensor product ``self ⊗ other``; see :func:`qtomo.quobj.ops.tensor`."""
        from .ops import tensor

        return tensor(self, other)

    def normalize(self) -> QuObject:
        """Return a normalized copy; see :func:`qtomo.quobj.ops.normalize`."""
        from .ops import normalize

        return normalize(self)

    def __add__(self, other):
        if not isinstance(other, QuObject):
            return NotImplemented
        self._check_same(other)
        return self._new(self._data + other._data)

    def __sub__(self, other):
        if not isinstance(other, QuObject):
            return NotImplemented
        self._check_same(other)
        return self._new(self._data - other._data)

    def __neg__(self):
        return self._new(-self._data)

    def __mul__(self, other):
        if isinstance(other, QuObject):
            return NotImplemented
        return self._new(self._data * _check_scalar(other))

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if isinstance(other, QuObject):
            return NotImplemented
        return self._new(self._data / _check_scalar(other))

    # ------------------------------------------------------------------
    # Comparison

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.dims == other.dims and torch.equal(self._data, other._data)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.dims, self._data.cpu().numpy().tobytes()))

    def isclose(self, other: QuObject, rtol: float = 1e-5, atol: float = 1e-8) -> bool:
        """Approximate equality: identical variant and dims, data within tolerance."""
        if type(other) is not type(self) or other.dims != self.dims:
            return False
        return bool(torch.allclose(self._data, other._data, rtol=rtol, atol=atol))

    def __repr__(self) -> str:
        space = "⊗".join(str(d) for d in self.dims)
        shape = "×".join(str(s) for s in self.shape)
        return f"{type(self).__name__}({shape}, dims={space})"


class Ket(QuObject):
    """
    Column state vector ``|ψ⟩``.

    Parameters
    ----------
    data:
        Sequence or tensor with ``prod(dims)`` entries. A ``(n, 1)`` column
        is accepted and flattened.
    dims:
        Subsystem dimensions. Defaults to a single subsystem.
    """

    def __init__(self, data, dims: Sequence[int] | int | None = None) -> None:
        tensor = _to_tensor(data)
        if tensor.dim() == 2 and tensor.shape[1] == 1:
            tensor = tensor.reshape(-1)
        if tensor.dim() != 1:
            raise DimensionError(f"Ket data must be a vector, got shape {tuple(tensor.shape)}")
        super().__init__(tensor, _as_dims(dims, tensor.shape[0]))

    def dag(self) -> Bra:
        """Dual vector ``⟨ψ|``."""
        return Bra(self._data.conj(), self.dims)

    def is_normalized(self, atol: float = 1e-8) -> bool:
        return abs(self.norm() - 1.0) <= atol


class Bra(QuObject):
    """Row dual vector ``⟨ψ|``; the conjugate transpose of a :class:`Ket`."""

    def __init__(self, data, dims: Sequence[int] | int | None = None) -> None:
        tensor = _to_tensor(data)
        if tensor.dim() == 2 and tensor.shape[0] == 1:
            tensor = tensor.reshape(-1)
        if tensor.dim() != 1:
            raise DimensionError(f"Bra data must be a vector, got shape {tuple(tensor.shape)}")
        super().__init__(tensor, _as_dims(dims, tensor.shape[0]))

    def dag(self) -> Ket:
        return Ket(self._data.conj(), self.dims)

    def is_normalized(self, atol: float = 1e-8) -> bool:
        return abs(self.norm() - 1.0) <= atol

    def __matmul__(self, other):
        if isinstance(other, Ket):
            if other.dims != self.dims:
                raise DimensionError(
                    f"subspace dimensions do not match: {self.dims} vs {other.dims}"
                )
            return complex((self._data @ other._data).item())
        if isinstance(other, Operator):
            if other.dims != self.dims:
                raise DimensionError(
                    f"subspace dimensions do not match: {self.dims} vs {other.dims}"
                )
            return Bra(self._data @ other._data, self.dims)
        return NotImplemented


class Operator(QuObject):
    """
    Square operator acting on the space described by ``dims``.

    The Hermitian tag is set at construction and never recomputed from the
    data. It only answers "is this known to be Hermitian"; an operator whose
    data happens to be Hermitian may still be tagged ``False``.

    Parameters
    ----------
    data:
        Square matrix of side ``prod(dims)``.
    dims:
        Subsystem dimensions. Defaults to a single subsystem.
    hermitian:
        Whether the operator is known to be Hermitian.
    """

    def __init__(
        self,
        data,
        dims: Sequence[int] | int | None = None,
        hermitian: bool = False,
    ) -> None:
        tensor = _to_tensor(data)
        if tensor.dim() != 2 or tensor.shape[0] != tensor.shape[1]:
            raise DimensionError(
                f"Operator data must be a square matrix, got shape {tuple(tensor.shape)}"
            )
        super().__init__(tensor, _as_dims(dims, tensor.shape[0]))
        self._hermitian = bool(hermitian)

    @classmethod
    def from_ket(cls, ket: Ket) -> Operator:
        """Projector ``|ψ⟩⟨ψ|`` (not normalized)."""
        data = ket._data.unsqueeze(1) @ ket._data.conj().unsqueeze(0)
        return cls(data, ket.dims, hermitian=True)

    @classmethod
    def identity(cls, dims: Sequence[int] | int) -> Operator:
        dims = (dims,) if isinstance(dims, numbers.Integral) else tuple(dims)
        size = math.prod(dims)
        return cls(torch.eye(size, dtype=DTYPE), dims, hermitian=True)

    @property
    def is_hermitian(self) -> bool:
        return self._hermitian

    def _new(self, data: torch.Tensor, hermitian: bool | None = None) -> Operator:
        if hermitian is None:
            hermitian = self._hermitian
        return Operator(data, self._dims, hermitian=hermitian)

    def trace(self) -> complex:
        return complex(torch.trace(self._data).item())

    def is_normalized(self, atol: float = 1e-8) -> bool:
        return abs(self.trace() - 1.0) <= atol

    def dag(self) -> Operator:
        return self._new(self._data.conj().transpose(0, 1))

    def transpose(self) -> Operator:
        return self._new(self._data.transpose(0, 1))

    def __add__(self, other):
        if not isinstance(other, QuObject):
            return NotImplemented
        self._check_same(other)
        return self._new(self._data + other._data, self._hermitian and other._hermitian)

    def __sub__(self, other):
        if not isinstance(other, QuObject):
            return NotImplemented
        self._check_same(other)
        return self._new(self._data - other._data, self._hermitian and other._hermitian)

    def __mul__(self, other):
        if isinstance(other, QuObject):
            return NotImplemented
        scalar = _check_scalar(other)
        return self._new(self._data * scalar, self._hermitian and scalar.imag == 0)

    def __truediv__(self, other):
        if isinstance(other, QuObject):
            return NotImplemented
        scalar = _check_scalar(other)
        return self._new(self._data / scalar, self._hermitian and scalar.imag == 0)

    def __matmul__(self, other):
        if isinstance(other, Operator):
            self._check_same(other)
            return self._new(self._data @ other._data, hermitian=False)
        if isinstance(other, Ket):
            if other.dims != self.dims:
                raise DimensionError(
                    f"subspace dimensions do not match: {self.dims} vs {other.dims}"
                )
            return Ket(self._data @ other._data, self.dims)
        return NotImplemented


__all__ = ["QuObject", "Ket", "Bra", "Operator", "DTYPE"]
