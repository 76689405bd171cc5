"""Tests for mixed_model_sample_size."""

import pytest

from pystudyplan.samplesize import (
    Assumptions,
    InvalidInput,
    mixed_model_sample_size,
    two_means_sample_size,
)
from pystudyplan.samplesize._mixed import repeated_measures_factor


def _a(**kwargs):
    return Assumptions(
        alpha=0.05,
        power=0.80,
        expected_mean_control=100.0,
        expected_mean_treatment=90.0,
        assumed_sd=10.0,
        **kwargs,
    )


class TestRepeatedMeasuresFactor:

    def test_single_measure(self):
        assert repeated_measures_factor(1, 0.7) == 1.0

    def test_independent_measures(self):
        assert repeated_measures_factor(4, 0.0) == pytest.approx(0.25)

    def test_icc_half(self):
        assert repeated_measures_factor(4, 0.5) == pytest.approx(0.625)


class TestMixedModel:

    def test_one_measure_matches_two_means(self):
        lmm = mixed_model_sample_size(_a(number_of_repeated_measures=1, intraclass_correlation=0.3))
        assert lmm.n == pytest.approx(two_means_sample_size(_a()).n)

    def test_variance_scaled(self):
        lmm = mixed_model_sample_size(_a(number_of_repeated_measures=4, intraclass_correlation=0.5))
        assert lmm.n == pytest.approx(0.625 * two_means_sample_size(_a()).n)
        assert lmm.method_id == "mixed-model-lmm"
        assert "0.6250" in lmm.notes[0]

    def test_default_icc(self):
        lmm = mixed_model_sample_size(_a(number_of_repeated_measures=4))
        assert lmm.n == pytest.approx(0.625 * two_means_sample_size(_a()).n)

    def test_default_measures(self):
        lmm = mixed_model_sample_size(_a(intraclass_correlation=0.2))
        assert lmm.n == pytest.approx(two_means_sample_size(_a()).n)

    def test_more_measures_fewer_n(self):
        n3 = mixed_model_sample_size(_a(number_of_repeated_measures=3)).n
        n6 = mixed_model_sample_size(_a(number_of_repeated_measures=6)).n
        assert n6 < n3

    def test_noninferiority_description(self):
        r = mixed_model_sample_size(
            _a(number_of_repeated_measures=3, hypothesis_type="noninferiority",
               noninferiority_margin=5.0),
        )
        assert r.method_id == "mixed-model-lmm"
        assert "non-inferiority" in r.description

    @pytest.mark.parametrize("m", [0, -2, 2.5])
    def test_invalid_measures(self, m):
        r = mixed_model_sample_size(_a(number_of_repeated_measures=m))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "number_of_repeated_measures"

    @pytest.mark.parametrize("icc", [1.0, -0.1, 1.5])
    def test_invalid_icc(self, icc):
        r = mixed_model_sample_size(_a(number_of_repeated_measures=3, intraclass_correlation=icc))
        assert isinstance(r, InvalidInput)
        assert r.parameter == "intraclass_correlation"
