"""Power-law (colored) noise for simulating slow parameter drift.

Noise with power spectral density ``S(f) ∝ f**exponent`` is produced by
shaping white Gaussian noise in the frequency domain:

1. draw white noise and take its real FFT;
2. scale every bin by ``(f + 1e-10) ** (exponent / 2)`` (the offset guards the
   zero-frequency bin);
3. transform back and rescale to zero mean and unit variance.

``exponent = -1`` gives flicker (pink) noise, ``0`` white noise and ``-2``
Brownian noise.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

_ZERO_FREQUENCY_GUARD = 1e-10


def power_law_noise(
    length: int,
    exponent: float = -1.0,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Generate a normalized power-law noise series.

    Args:
        length: Number of samples (at least 2).
        exponent: Spectral exponent of the power spectral density
            (default: -1, flicker noise).
        rng: NumPy random generator; a fresh ``default_rng()`` when omitted.
            Pass a seeded generator for reproducible series.

    Returns:
        1D float64 array of ``length`` samples with zero mean and unit
        (sample) standard deviation.

    Raises:
        ValueError: If ``length`` is smaller than 2.
    """
    length = int(length)
    if length < 2:
        raise ValueError(f"length must be at least 2, got {length}")
    if rng is None:
        rng = np.random.default_rng()

    white = rng.standard_normal(length)
    spectrum = np.fft.rfft(white)
    freqs = np.fft.rfftfreq(length)

    shaped = spectrum * (np.abs(freqs) + _ZERO_FREQUENCY_GUARD) ** (exponent / 2.0)
    noise = np.fft.irfft(shaped, n=length)

    return (noise - noise.mean()) / noise.std(ddof=1)


__all__ = ["power_law_noise"]
