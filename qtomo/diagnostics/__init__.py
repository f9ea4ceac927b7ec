"""Diagnostics for quantum states and channels."""

from .core import (
    assert_cptp_choi,
    is_cptp_choi,
    is_hermitian,
    is_psd,
    min_eigenvalue,
    tp_residual,
)

__all__ = [
    "is_hermitian",
    "min_eigenvalue",
    "is_psd",
    "tp_residual",
    "is_cptp_choi",
    "assert_cptp_choi",
]
