"""Tests for single-proportion precision and diagnostic accuracy."""

import math

import pytest

from pystudyplan.samplesize import (
    Assumptions,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    UnsupportedDesign,
    diagnostic_accuracy_sample_size,
    single_proportion_precision_sample_size,
    z_from_alpha,
)


def _est(**kwargs):
    kwargs.setdefault("precision", 0.05)
    return Assumptions(alpha=0.05, power=0.80, hypothesis_type="estimation", **kwargs)


class TestSingleProportionPrecision:

    def test_reference_value(self):
        r = single_proportion_precision_sample_size(_est(expected_proportion=0.5))
        assert isinstance(r, RawEstimate)
        assert r.n == pytest.approx(384.16, abs=1e-9)
        assert r.method_id == "single-proportion-precision"
        assert r.z_beta is None

    def test_power_not_used(self):
        a = _est(expected_proportion=0.3)
        r1 = single_proportion_precision_sample_size(a)
        r2 = single_proportion_precision_sample_size(a.replace(power=0.95))
        assert r1.n == r2.n

    def test_half_precision_quadruples_n(self):
        r1 = single_proportion_precision_sample_size(_est(expected_proportion=0.2, precision=0.04))
        r2 = single_proportion_precision_sample_size(_est(expected_proportion=0.2, precision=0.02))
        assert r2.n == pytest.approx(4 * r1.n)

    def test_computed_alpha(self):
        r = single_proportion_precision_sample_size(
            _est(expected_proportion=0.5).replace(alpha=0.10),
        )
        assert r.n == pytest.approx(z_from_alpha(0.10, True) ** 2 * 0.25 / 0.0025)

    def test_requires_estimation(self):
        a = Assumptions(alpha=0.05, power=0.8, expected_proportion=0.5, precision=0.05)
        r = single_proportion_precision_sample_size(a)
        assert isinstance(r, UnsupportedDesign)
        assert "estimation" in r.message

    def test_missing_proportion(self):
        r = single_proportion_precision_sample_size(_est())
        assert isinstance(r, IncompleteInput)
        assert r.missing == ("expected_proportion",)

    def test_missing_precision(self):
        r = single_proportion_precision_sample_size(_est(expected_proportion=0.5, precision=None))
        assert isinstance(r, IncompleteInput)
        assert r.missing == ("precision",)

    @pytest.mark.parametrize("p", [0.0, 1.0, 1.3])
    def test_invalid_proportion(self, p):
        r = single_proportion_precision_sample_size(_est(expected_proportion=p))
        assert isinstance(r, InvalidInput)

    def test_invalid_precision(self):
        r = single_proportion_precision_sample_size(_est(expected_proportion=0.5, precision=0.0))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "precision"

    @pytest.mark.parametrize("d", [math.inf, math.nan])
    def test_non_finite_precision(self, d):
        r = single_proportion_precision_sample_size(_est(expected_proportion=0.5, precision=d))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "precision"

    def test_invalid_alpha(self):
        a = _est(expected_proportion=0.5).replace(alpha=0.7)
        r = single_proportion_precision_sample_size(a)
        assert isinstance(r, InvalidInput)
        assert r.parameter == "alpha"


class TestDiagnosticAccuracy:

    def test_sensitivity_only(self):
        r = diagnostic_accuracy_sample_size(
            _est(target_metric="sensitivity", expected_sensitivity=0.85),
        )
        assert r.n == pytest.approx(3.8416 * 0.85 * 0.15 / 0.0025)
        assert r.method_id == "diagnostic-accuracy"
        assert r.notes == ()

    def test_specificity_only(self):
        r = diagnostic_accuracy_sample_size(
            _est(target_metric="specificity", expected_specificity=0.90),
        )
        assert r.n == pytest.approx(3.8416 * 0.09 / 0.0025)

    def test_both_takes_maximum(self):
        r = diagnostic_accuracy_sample_size(
            _est(target_metric="both", expected_sensitivity=0.85, expected_specificity=0.90),
        )
        assert r.n == pytest.approx(3.8416 * 0.85 * 0.15 / 0.0025)
        assert r.notes == ("Sample size driven by the sensitivity precision target.",)

    def test_both_driven_by_specificity(self):
        r = diagnostic_accuracy_sample_size(
            _est(target_metric="both", expected_sensitivity=0.95, expected_specificity=0.60),
        )
        assert r.n == pytest.approx(3.8416 * 0.24 / 0.0025)
        assert "specificity" in r.notes[0]

    def test_missing_target(self):
        r = diagnostic_accuracy_sample_size(_est(expected_sensitivity=0.85))
        assert isinstance(r, IncompleteInput)
        assert r.missing == ("target_metric",)

    def test_unknown_target(self):
        r = diagnostic_accuracy_sample_size(_est(target_metric="ppv", expected_sensitivity=0.85))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "target_metric"

    def test_missing_metric_value(self):
        r = diagnostic_accuracy_sample_size(
            _est(target_metric="both", expected_sensitivity=0.85),
        )
        assert isinstance(r, IncompleteInput)
        assert r.missing == ("expected_specificity",)

    def test_metric_out_of_range(self):
        r = diagnostic_accuracy_sample_size(
            _est(target_metric="sensitivity", expected_sensitivity=1.2),
        )
        assert isinstance(r, InvalidInput)
        assert r.parameter == "expected_sensitivity"

    def test_requires_estimation(self):
        a = Assumptions(alpha=0.05, power=0.8, precision=0.05,
                        target_metric="sensitivity", expected_sensitivity=0.85)
        assert isinstance(diagnostic_accuracy_sample_size(a), UnsupportedDesign)
