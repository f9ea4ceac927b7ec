"""Gate constants and the qubit rotation builder."""

from .standard import CNOT, CZ, RCNOT, H, S, T, is_unitary, rotation

__all__ = [
    "H",
    "S",
    "T",
    "CNOT",
    "RCNOT",
    "CZ",
    "rotation",
    "is_unitary",
]
