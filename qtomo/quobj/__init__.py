"""Quantum objects over tensor-product Hilbert spaces and their algebra."""

from .core import DTYPE, Bra, Ket, Operator, QuObject
from .ops import (
    as_matrix,
    dims_match,
    isqrt,
    normalize,
    partial_trace,
    qeye,
    tensor,
    unvectorize,
    vectorize,
)

__all__ = [
    "DTYPE",
    "QuObject",
    "Ket",
    "Bra",
    "Operator",
    "tensor",
    "partial_trace",
    "vectorize",
    "unvectorize",
    "normalize",
    "qeye",
    "dims_match",
    "isqrt",
    "as_matrix",
]
