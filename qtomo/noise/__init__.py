"""Colored noise generators used to model decoherence and drift."""

from .power_law import power_law_noise

__all__ = ["power_law_noise"]
