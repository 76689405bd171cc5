"""Sample size for comparing two independent proportions.

Normal-approximation formula with unpooled variance::

    n per group = (z_alpha + z_beta)^2 * (p1(1-p1) + p2(1-p2)) / effect^2

where ``effect`` is ``p1 - p2`` (superiority), ``p1 - p2 + margin``
(non-inferiority), or ``margin - |p1 - p2|`` with alpha halved
(equivalence, TOST).  ``p1`` is the control event rate.

Validates against: R TrialSize::TwoSampleProportion.Equality(),
TwoSampleProportion.NIS(), TwoSampleProportion.Equivalence()
"""

from __future__ import annotations

from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    _is_probability,
    _missing,
    _require_test_hypothesis,
    _two_group_n,
    is_failure,
)

_METHOD_IDS = {
    "superiority": "two-proportions",
    "noninferiority": "noninferiority-proportions",
    "equivalence": "equivalence-proportions",
}
_DESCRIPTIONS = {
    "superiority": "Two-sample comparison of proportions (superiority)",
    "noninferiority": "Two-sample comparison of proportions (non-inferiority)",
    "equivalence": "Two-sample comparison of proportions (equivalence, TOST)",
}


def _event_rates(assumptions: Assumptions) -> tuple[float, float] | Failure:
    """Validated ``(p1, p2)`` = (control, treatment) event rates."""
    missing = _missing(
        assumptions, "expected_control_event_rate", "expected_treatment_event_rate",
    )
    if missing:
        return IncompleteInput(missing, "Control and intervention event rates are required.")

    p1 = assumptions.expected_control_event_rate
    p2 = assumptions.expected_treatment_event_rate
    if not _is_probability(p1):
        return InvalidInput(
            "expected_control_event_rate",
            f"Event rates must be between 0 and 1; control event rate is {p1}.",
        )
    if not _is_probability(p2):
        return InvalidInput(
            "expected_treatment_event_rate",
            f"Event rates must be between 0 and 1; intervention event rate is {p2}.",
        )
    return p1, p2


def _proportions_estimate(
    assumptions: Assumptions,
    extra_variance: float = 0.0,
) -> tuple[float, float, float, tuple[str, ...]] | Failure:
    """Shared core: ``(n_per_group, z_alpha, z_beta, warnings)`` or a failure.

    *extra_variance* is added to the binomial variance term (Bayesian blend).
    """
    unsupported = _require_test_hypothesis(assumptions, "Two-proportion")
    if unsupported is not None:
        return unsupported

    rates = _event_rates(assumptions)
    if is_failure(rates):
        return rates
    p1, p2 = rates

    variance = p1 * (1.0 - p1) + p2 * (1.0 - p2) + extra_variance
    return _two_group_n(assumptions, p1 - p2, variance, "event rates")


def two_proportions_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Per-group sample size for two independent proportions.

    Uses ``expected_control_event_rate`` (p1),
    ``expected_treatment_event_rate`` (p2), and, for margin hypotheses,
    ``noninferiority_margin`` or ``equivalence_margin``.

    Returns
    -------
    RawEstimate or failure payload
        Unrounded per-group ``n`` before dropout/cluster/sequential inflation.

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, expected_control_event_rate=0.30,
    ...                 expected_treatment_event_rate=0.18)
    >>> round(two_proportions_sample_size(a).n, 1)
    194.9
    """
    out = _proportions_estimate(assumptions)
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
