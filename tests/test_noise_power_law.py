"""Tests for power-law noise generation."""

import numpy as np
import pytest

from qtomo.noise import power_law_noise


def _spectral_slope(exponent, rng, length=1024, realizations=64):
    """Least-squares slope of the averaged periodogram on log-log axes."""
    power = np.zeros(length // 2 + 1)
    for _ in range(realizations):
        series = power_law_noise(length, exponent=exponent, rng=rng)
        power += np.abs(np.fft.rfft(series)) ** 2
    freqs = np.fft.rfftfreq(length)
    # Skip the DC bin, which the normalization removes
    slope, _ = np.polyfit(np.log(freqs[1:]), np.log(power[1:]), 1)
    return slope


class TestPowerLawNoise:
    """Tests for power_law_noise."""

    @pytest.mark.parametrize("length", [2, 3, 100, 257])
    def test_length(self, length, rng):
        assert power_law_noise(length, rng=rng).shape == (length,)

    def test_normalized(self, rng):
        series = power_law_noise(500, rng=rng)
        assert abs(series.mean()) < 1e-10
        assert series.std(ddof=1) == pytest.approx(1.0)
        assert series.dtype == np.float64

    def test_seeded_generator_is_reproducible(self):
        a = power_law_noise(128, rng=np.random.default_rng(7))
        b = power_law_noise(128, rng=np.random.default_rng(7))
        c = power_law_noise(128, rng=np.random.default_rng(8))
        assert np.array_equal(a, b)
        assert not np.allclose(a, c)

    def test_default_generator(self):
        assert power_law_noise(64).shape == (64,)

    @pytest.mark.parametrize("exponent", [-1.0, 0.0, -2.0])
    def test_spectral_slope(self, exponent, rng):
        assert _spectral_slope(exponent, rng) == pytest.approx(exponent, abs=0.25)

    def test_flicker_noise_is_correlated(self, rng):
        """Neighbouring samples of 1/f noise are positively correlated."""
        series = power_law_noise(4096, exponent=-1.0, rng=rng)
        lag_one = np.corrcoef(series[:-1], series[1:])[0, 1]
        assert lag_one > 0.3

    @pytest.mark.parametrize("length", [0, 1])
    def test_too_short(self, length):
        with pytest.raises(ValueError):
            power_law_noise(length)
