"""Sample size for a linear mixed model with repeated measures.

Averaging ``m`` correlated measurements per subject shrinks the variance of
the subject-level mean by the repeated-measures design factor::

    sigma_eff^2 = sigma^2 * (1 + (m - 1) * ICC) / m

after which the two-means formula applies unchanged.
"""

from __future__ import annotations

from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    InvalidInput,
    RawEstimate,
    is_failure,
)
from pystudyplan.samplesize._means import _DESCRIPTIONS, _means_estimate

_DEFAULT_REPEATED_MEASURES = 1
_DEFAULT_ICC = 0.5


def repeated_measures_factor(m: int, icc: float) -> float:
    """Variance multiplier ``(1 + (m - 1) * icc) / m``."""
    return (1.0 + (m - 1) * icc) / m


def mixed_model_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Per-group sample size for a two-arm LMM comparison of means.

    ``number_of_repeated_measures`` defaults to 1 and must be a positive
    integer; ``intraclass_correlation`` defaults to 0.5 and must lie in
    [0, 1).  Margin hypotheses behave as in the two-means formula.
    """
    m = assumptions.number_of_repeated_measures
    if m is None:
        m = _DEFAULT_REPEATED_MEASURES
    if isinstance(m, bool) or not float(m).is_integer() or m < 1:
        return InvalidInput(
            "number_of_repeated_measures",
            f"Number of repeated measures must be a positive integer, got {m}.",
        )
    m = int(m)

    icc = assumptions.intraclass_correlation
    if icc is None:
        icc = _DEFAULT_ICC
    if not (0.0 <= icc < 1.0):
        return InvalidInput(
            "intraclass_correlation",
            f"Intraclass correlation must be in [0, 1), got {icc}.",
        )

    factor = repeated_measures_factor(m, icc)
    out = _means_estimate(assumptions, variance_factor=factor)
    if is_failure(out):
        return out
    n, z_alpha, z_beta, warnings = out

    description = _DESCRIPTIONS[assumptions.hypothesis_type].replace(
        "Two-sample comparison of means", "Linear mixed model, repeated measures",
    )
    return RawEstimate(
        n=n,
        method_id="mixed-model-lmm",
        description=description,
        z_alpha=z_alpha,
        z_beta=z_beta,
        notes=(
            f"Variance scaled by repeated-measures factor {factor:.4f} "
            f"({m} measures per subject, ICC = {icc}).",
        ),
        warnings=warnings,
    )
