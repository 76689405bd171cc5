"""Tests for two_proportions_sample_size."""

import math

import pytest

from pystudyplan.samplesize import (
    Assumptions,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    UnsupportedDesign,
    two_proportions_sample_size,
    z_from_alpha,
    z_from_power,
)


def _a(p1=0.30, p2=0.18, **kwargs):
    kwargs.setdefault("alpha", 0.05)
    kwargs.setdefault("power", 0.80)
    return Assumptions(
        expected_control_event_rate=p1, expected_treatment_event_rate=p2, **kwargs,
    )


class TestSuperiority:
    """Unpooled normal-approximation formula."""

    def test_reference_value(self):
        r = two_proportions_sample_size(_a())
        assert isinstance(r, RawEstimate)
        assert r.n == pytest.approx(194.92, abs=0.01)
        assert r.method_id == "two-proportions"

    def test_formula(self):
        r = two_proportions_sample_size(_a())
        expected = (1.96 + z_from_power(0.80)) ** 2 * (0.21 + 0.18 * 0.82) / 0.12 ** 2
        assert r.n == pytest.approx(expected, rel=1e-12)

    def test_records_critical_values(self):
        r = two_proportions_sample_size(_a())
        assert r.z_alpha == 1.96
        assert r.z_beta == pytest.approx(z_from_power(0.80))

    def test_direction_does_not_matter(self):
        """Superiority uses the absolute difference."""
        r1 = two_proportions_sample_size(_a(0.30, 0.18))
        r2 = two_proportions_sample_size(_a(0.18, 0.30))
        assert r1.n == pytest.approx(r2.n)

    def test_higher_power_more_n(self):
        r80 = two_proportions_sample_size(_a(power=0.80))
        r90 = two_proportions_sample_size(_a(power=0.90))
        assert r90.n > r80.n

    def test_one_sided_fewer_n(self):
        r2 = two_proportions_sample_size(_a())
        r1 = two_proportions_sample_size(_a(two_sided=False))
        assert r1.n < r2.n

    def test_equal_rates_invalid(self):
        r = two_proportions_sample_size(_a(0.25, 0.25))
        assert isinstance(r, InvalidInput)
        assert "differ" in r.message


class TestMargins:
    """Non-inferiority and equivalence (TOST)."""

    def test_noninferiority_shifts_effect(self):
        r = two_proportions_sample_size(
            _a(0.30, 0.35, hypothesis_type="noninferiority", noninferiority_margin=0.08),
        )
        variance = 0.30 * 0.70 + 0.35 * 0.65
        expected = (1.96 + z_from_power(0.80)) ** 2 * variance / 0.03 ** 2
        assert r.n == pytest.approx(expected, rel=1e-9)
        assert r.method_id == "noninferiority-proportions"

    def test_noninferiority_missing_margin(self):
        r = two_proportions_sample_size(_a(hypothesis_type="noninferiority"))
        assert isinstance(r, IncompleteInput)
        assert r.missing == ("noninferiority_margin",)

    def test_noninferiority_margin_too_small(self):
        """Effective difference p1 - p2 + margin must stay positive."""
        r = two_proportions_sample_size(
            _a(0.20, 0.35, hypothesis_type="noninferiority", noninferiority_margin=0.10),
        )
        assert isinstance(r, InvalidInput)
        assert r.parameter == "noninferiority_margin"

    def test_noninferiority_zero_margin_invalid(self):
        r = two_proportions_sample_size(
            _a(hypothesis_type="noninferiority", noninferiority_margin=0.0),
        )
        assert isinstance(r, InvalidInput)

    def test_equivalence_halves_alpha(self):
        r = two_proportions_sample_size(
            _a(0.30, 0.30, hypothesis_type="equivalence", equivalence_margin=0.10),
        )
        z_a = z_from_alpha(0.025, True)
        expected = (z_a + z_from_power(0.80)) ** 2 * 0.42 / 0.10 ** 2
        assert r.z_alpha == pytest.approx(z_a)
        assert r.n == pytest.approx(expected, rel=1e-9)
        assert r.method_id == "equivalence-proportions"
        assert r.warnings == ()

    def test_equivalence_difference_beyond_margin_warns(self):
        r = two_proportions_sample_size(
            _a(0.30, 0.18, hypothesis_type="equivalence", equivalence_margin=0.10),
        )
        assert isinstance(r, RawEstimate)
        assert len(r.warnings) == 1
        assert "unachievable" in r.warnings[0]

    def test_equivalence_margin_equal_to_difference_invalid(self):
        r = two_proportions_sample_size(
            _a(0.30, 0.20, hypothesis_type="equivalence", equivalence_margin=0.10),
        )
        assert isinstance(r, InvalidInput)
        assert r.parameter == "equivalence_margin"

    @pytest.mark.parametrize(
        "hypothesis, field",
        [("noninferiority", "noninferiority_margin"), ("equivalence", "equivalence_margin")],
    )
    def test_infinite_margin_invalid(self, hypothesis, field):
        r = two_proportions_sample_size(_a(hypothesis_type=hypothesis, **{field: math.inf}))
        assert isinstance(r, InvalidInput)
        assert r.parameter == field

    def test_equivalence_alpha_range_checked_before_halving(self):
        r = two_proportions_sample_size(
            _a(0.30, 0.30, alpha=0.7, hypothesis_type="equivalence", equivalence_margin=0.10),
        )
        assert isinstance(r, InvalidInput)
        assert r.parameter == "alpha"

    def test_equivalence_missing_margin(self):
        r = two_proportions_sample_size(_a(hypothesis_type="equivalence"))
        assert isinstance(r, IncompleteInput)

    def test_hypothesis_ordering(self):
        """Same inputs: equivalence >= non-inferiority >= superiority."""
        common = dict(noninferiority_margin=0.08, equivalence_margin=0.08)
        sup = two_proportions_sample_size(_a(0.30, 0.35, **common))
        ni = two_proportions_sample_size(_a(0.30, 0.35, hypothesis_type="noninferiority", **common))
        eq = two_proportions_sample_size(_a(0.30, 0.35, hypothesis_type="equivalence", **common))
        assert eq.n >= ni.n >= sup.n


class TestInputErrors:

    def test_missing_treatment_rate(self):
        r = two_proportions_sample_size(_a(p2=None))
        assert isinstance(r, IncompleteInput)
        assert r.missing == ("expected_treatment_event_rate",)
        assert r.message == "Control and intervention event rates are required."

    def test_missing_both_rates(self):
        r = two_proportions_sample_size(_a(p1=None, p2=None))
        assert r.missing == ("expected_control_event_rate", "expected_treatment_event_rate")

    @pytest.mark.parametrize("p1", [0.0, 1.0, 1.2, -0.3])
    def test_control_rate_out_of_range(self, p1):
        r = two_proportions_sample_size(_a(p1=p1))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "expected_control_event_rate"

    def test_treatment_rate_out_of_range(self):
        r = two_proportions_sample_size(_a(p2=1.5))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "expected_treatment_event_rate"

    @pytest.mark.parametrize("alpha, power", [(0.6, 0.8), (0.0, 0.8), (0.05, 0.4), (0.05, 0.9999)])
    def test_alpha_power_out_of_range(self, alpha, power):
        r = two_proportions_sample_size(_a(alpha=alpha, power=power))
        assert isinstance(r, InvalidInput)
        assert r.message == "Alpha or power inputs are outside supported ranges."

    def test_estimation_hypothesis_unsupported(self):
        r = two_proportions_sample_size(_a(hypothesis_type="estimation"))
        assert isinstance(r, UnsupportedDesign)
