"""Bayesian-blended sample size for two proportions or two means.

A closed-form blend only: the prior variance is added to the frequentist
variance term before the usual formula is applied.  An infinite prior
variance is an uninformative prior and reproduces the frequentist result.
No posterior computation is performed.
"""

from __future__ import annotations

import math

from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    is_failure,
)
from pystudyplan.samplesize._means import _means_estimate
from pystudyplan.samplesize._proportions import _proportions_estimate

_HYPOTHESIS_LABELS = {
    "superiority": "superiority",
    "noninferiority": "non-inferiority",
    "equivalence": "equivalence, TOST",
}


def _prior(assumptions: Assumptions) -> tuple[float, str] | Failure:
    """``(extra_variance, note)`` for the configured prior."""
    prior = assumptions.prior_variance
    if prior is None:
        return IncompleteInput(("prior_variance",), "Prior variance is required for Bayesian sample size.")
    if math.isnan(prior) or prior < 0:
        return InvalidInput("prior_variance", f"Prior variance must be non-negative, got {prior}.")
    if math.isinf(prior):
        return 0.0, "Uninformative prior: variance unchanged, identical to the frequentist calculation."
    return prior, f"Informative prior: prior variance {prior:g} added to the variance term."


def _bayesian_estimate(
    assumptions: Assumptions,
    outcome: str,
) -> RawEstimate | Failure:
    prior = _prior(assumptions)
    if is_failure(prior):
        return prior
    extra_variance, note = prior

    if outcome == "proportions":
        out = _proportions_estimate(assumptions, extra_variance=extra_variance)
    else:
        out = _means_estimate(assumptions, extra_variance=extra_variance)
    if is_failure(out):
        return out
    n, z_alpha, z_beta, warnings = out

    label = _HYPOTHESIS_LABELS[assumptions.hypothesis_type]
    return RawEstimate(
        n=n,
        method_id=f"bayesian-{outcome}",
        description=f"Bayesian-blended comparison of {outcome} ({label})",
        z_alpha=z_alpha,
        z_beta=z_beta,
        notes=(note,),
        warnings=warnings,
    )


def bayesian_proportions_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Two-proportions sample size with ``prior_variance`` blended in."""
    return _bayesian_estimate(assumptions, "proportions")


def bayesian_means_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Two-means sample size with ``prior_variance`` blended into ``sd^2``."""
    return _bayesian_estimate(assumptions, "means")
