"""Sample size for comparing two independent means.

Pooled-variance normal approximation::

    n per group = 2 * (z_alpha + z_beta)^2 * sigma^2 / effect^2

with ``effect`` derived from the control-minus-treatment mean difference
exactly as for two proportions (plain, margin-shifted, or TOST).  Also
used by the linear mixed model and Bayesian variants, which only change
``sigma^2``.

Validates against: R TrialSize::TwoSampleMean.Equality(),
TwoSampleMean.NIS(), TwoSampleMean.Equivalence()
"""

from __future__ import annotations

import math

from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    _missing,
    _require_test_hypothesis,
    _two_group_n,
    is_failure,
)

_METHOD_IDS = {
    "superiority": "two-means",
    "noninferiority": "noninferiority-means",
    "equivalence": "equivalence-means",
}
_DESCRIPTIONS = {
    "superiority": "Two-sample comparison of means (superiority)",
    "noninferiority": "Two-sample comparison of means (non-inferiority)",
    "equivalence": "Two-sample comparison of means (equivalence, TOST)",
}


def _means_inputs(assumptions: Assumptions) -> tuple[float, float] | Failure:
    """Validated ``(sd, control_minus_treatment)``."""
    sd = assumptions.assumed_sd
    if sd is None:
        return IncompleteInput(("assumed_sd",), "A common standard deviation is required.")
    if not (math.isfinite(sd) and sd > 0):
        return InvalidInput(
            "assumed_sd", f"Standard deviation must be a finite positive number, got {sd}.",
        )

    missing = _missing(assumptions, "expected_mean_control", "expected_mean_treatment")
    if missing:
        return IncompleteInput(missing, "Both mean estimates are required.")

    for name in ("expected_mean_control", "expected_mean_treatment"):
        value = getattr(assumptions, name)
        if not math.isfinite(value):
            return InvalidInput(name, f"Mean estimates must be finite numbers, got {value}.")

    return sd, assumptions.expected_mean_control - assumptions.expected_mean_treatment


def _means_estimate(
    assumptions: Assumptions,
    variance_factor: float = 1.0,
    extra_variance: float = 0.0,
) -> tuple[float, float, float, tuple[str, ...]] | Failure:
    """Shared core: ``(n_per_group, z_alpha, z_beta, warnings)`` or a failure.

    The variance term is ``sd^2 * variance_factor + extra_variance``.
    """
    unsupported = _require_test_hypothesis(assumptions, "Two-means")
    if unsupported is not None:
        return unsupported

    inputs = _means_inputs(assumptions)
    if is_failure(inputs):
        return inputs
    sd, difference = inputs

    variance = sd * sd * variance_factor + extra_variance
    return _two_group_n(assumptions, difference, 2.0 * variance, "means")


def two_means_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Per-group sample size for two independent means.

    Uses ``expected_mean_control``, ``expected_mean_treatment``,
    ``assumed_sd`` and, for margin hypotheses, the matching margin on the
    outcome scale.

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, expected_mean_control=100.0,
    ...                 expected_mean_treatment=90.0, assumed_sd=10.0)
    >>> round(two_means_sample_size(a).n, 2)
    15.7
    """
    out = _means_estimate(assumptions)
    if is_failure(out):
        return out
    n, z_alpha, z_beta, warnings = out

    hypothesis = assumptions.hypothesis_type
    return RawEstimate(
        n=n,
        method_id=_METHOD_IDS[hypothesis],
        description=_DESCRIPTIONS[hypothesis],
        z_alpha=z_alpha,
        z_beta=z_beta,
        warnings=warnings,
    )
