"""Tests for inverse_normal_cdf, z_from_alpha and z_from_power."""

import math

import numpy as np
import pytest
from scipy.stats import norm

from pystudyplan.samplesize import inverse_normal_cdf, z_from_alpha, z_from_power


class TestInverseNormalCdf:
    """Accuracy of the rational approximation against scipy."""

    def test_median_is_zero(self):
        assert inverse_normal_cdf(0.5) == pytest.approx(0.0, abs=1e-9)

    def test_975_quantile(self):
        assert inverse_normal_cdf(0.975) == pytest.approx(1.959964, abs=1e-6)

    def test_central_region_absolute_error(self):
        """Every sample size scales with z^2, so the centre must be tight."""
        p = np.linspace(0.02425, 0.97575, 2001)
        approx = np.array([inverse_normal_cdf(x) for x in p])
        assert np.max(np.abs(approx - norm.ppf(p))) < 5e-9

    def test_tails_relative_error(self):
        p = np.concatenate([
            np.logspace(-12, np.log10(0.02425), 200),
            1.0 - np.logspace(np.log10(0.02425), -8, 200),
        ])
        approx = np.array([inverse_normal_cdf(x) for x in p])
        np.testing.assert_allclose(approx, norm.ppf(p), rtol=2e-9, atol=1e-12)

    def test_symmetry(self):
        for p in (0.001, 0.01, 0.1, 0.3, 0.45):
            assert inverse_normal_cdf(p) == pytest.approx(-inverse_normal_cdf(1.0 - p), abs=1e-9)

    def test_monotonic(self):
        p = np.linspace(0.0005, 0.9995, 999)
        z = np.array([inverse_normal_cdf(x) for x in p])
        assert np.all(np.diff(z) > 0)

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.5])
    def test_outside_unit_interval_is_nan(self, p):
        assert math.isnan(inverse_normal_cdf(p))


class TestZFromAlpha:
    """Critical values, tabled and computed."""

    def test_tabled_values_exact(self):
        assert z_from_alpha(0.05, True) == 1.96
        assert z_from_alpha(0.05, False) == 1.645
        assert z_from_alpha(0.01, True) == 2.576
        assert z_from_alpha(0.01, False) == 2.326

    def test_tabled_values_close_to_exact_quantiles(self):
        assert z_from_alpha(0.05, True) == pytest.approx(norm.ppf(0.975), abs=1e-3)
        assert z_from_alpha(0.05, False) == pytest.approx(norm.ppf(0.95), abs=1e-3)
        assert z_from_alpha(0.01, True) == pytest.approx(norm.ppf(0.995), abs=1e-3)

    def test_computed_two_sided(self):
        assert z_from_alpha(0.10, True) == pytest.approx(norm.ppf(0.95), rel=1e-8)

    def test_computed_one_sided(self):
        assert z_from_alpha(0.025, False) == pytest.approx(norm.ppf(0.975), rel=1e-8)

    def test_smaller_alpha_larger_z(self):
        assert z_from_alpha(0.001, True) > z_from_alpha(0.02, True) > z_from_alpha(0.2, True)

    @pytest.mark.parametrize("alpha", [0.0, 0.5, -0.01, 0.7])
    def test_out_of_range_is_nan(self, alpha):
        assert math.isnan(z_from_alpha(alpha, True))


class TestZFromPower:

    def test_power_80(self):
        assert z_from_power(0.80) == pytest.approx(0.841621, abs=1e-6)

    def test_power_90(self):
        assert z_from_power(0.90) == pytest.approx(norm.ppf(0.90), rel=1e-8)

    @pytest.mark.parametrize("power", [0.5, 0.999, 0.3, 1.0])
    def test_out_of_range_is_nan(self, power):
        assert math.isnan(z_from_power(power))
