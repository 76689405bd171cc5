"""Precision-based sample sizes for estimating proportions.

A confidence interval of half-width ``d`` around a proportion ``p`` needs::

    n = z_alpha^2 * p * (1 - p) / d^2

Diagnostic accuracy studies apply the same formula to sensitivity and/or
specificity and keep the larger requirement.
"""

from __future__ import annotations

import math

from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    _is_probability,
    _missing,
    _require_estimation,
    is_failure,
)
from pystudyplan.samplesize._normal import z_from_alpha


def _precision_n(z_alpha: float, p: float, d: float) -> float:
    return z_alpha ** 2 * p * (1.0 - p) / (d * d)


def _precision_inputs(assumptions: Assumptions) -> tuple[float, float] | Failure:
    """Validated ``(z_alpha, d)`` shared by both precision methods."""
    d = assumptions.precision
    if d is None:
        return IncompleteInput(("precision",), "Desired precision (half-width) is required.")
    if not (math.isfinite(d) and d > 0):
        return InvalidInput(
            "precision",
            f"Desired precision (half-width) must be a finite positive number, got {d}.",
        )

    z_alpha = z_from_alpha(assumptions.alpha, assumptions.two_sided)
    if not math.isfinite(z_alpha):
        return InvalidInput("alpha", "Alpha input is outside supported ranges.")
    return z_alpha, d


def single_proportion_precision_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Total sample size to estimate one proportion to a given precision.

    Requires ``hypothesis_type == 'estimation'``, ``expected_proportion``
    in (0, 1) and a positive ``precision`` (CI half-width).

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, hypothesis_type="estimation",
    ...                 expected_proportion=0.5, precision=0.05)
    >>> round(single_proportion_precision_sample_size(a).n, 2)
    384.16
    """
    unsupported = _require_estimation(assumptions, "Single proportion precision")
    if unsupported is not None:
        return unsupported

    p = assumptions.expected_proportion
    if p is None:
        return IncompleteInput(("expected_proportion",), "Expected proportion is required.")
    if not _is_probability(p):
        return InvalidInput(
            "expected_proportion", f"Expected proportion must be between 0 and 1, got {p}.",
        )

    inputs = _precision_inputs(assumptions)
    if is_failure(inputs):
        return inputs
    z_alpha, d = inputs

    return RawEstimate(
        n=_precision_n(z_alpha, p, d),
        method_id="single-proportion-precision",
        description="Single proportion precision target",
        z_alpha=z_alpha,
    )


def diagnostic_accuracy_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Total sample size for estimating sensitivity and/or specificity.

    ``target_metric`` selects ``'sensitivity'``, ``'specificity'`` or
    ``'both'``; the returned ``n`` is the maximum over the selected metrics
    so one study satisfies every precision target at once.
    """
    unsupported = _require_estimation(assumptions, "Diagnostic accuracy")
    if unsupported is not None:
        return unsupported

    inputs = _precision_inputs(assumptions)
    if is_failure(inputs):
        return inputs
    z_alpha, d = inputs

    target = assumptions.target_metric
    metrics: list[tuple[str, str]] = []
    if target in ("sensitivity", "both"):
        metrics.append(("sensitivity", "expected_sensitivity"))
    if target in ("specificity", "both"):
        metrics.append(("specificity", "expected_specificity"))
    if not metrics:
        if target is None:
            return IncompleteInput(
                ("target_metric",),
                "Specify whether sensitivity, specificity, or both should be estimated.",
            )
        return InvalidInput(
            "target_metric",
            f"target_metric must be 'sensitivity', 'specificity' or 'both', got {target!r}.",
        )

    missing = _missing(assumptions, *(name for _, name in metrics))
    if missing:
        return IncompleteInput(
            missing,
            f"Expected {' and '.join(label for label, _ in metrics)} "
            f"{'is' if len(metrics) == 1 else 'are'} required.",
        )

    required = 0.0
    driver = metrics[0][0]
    for label, name in metrics:
        p = getattr(assumptions, name)
        if not _is_probability(p):
            return InvalidInput(
                name, f"Expected {label} must be a probability between 0 and 1, got {p}.",
            )
        n = _precision_n(z_alpha, p, d)
        if n > required:
            required, driver = n, label

    notes: tuple[str, ...] = ()
    if len(metrics) > 1:
        notes = (f"Sample size driven by the {driver} precision target.",)

    return RawEstimate(
        n=required,
        method_id="diagnostic-accuracy",
        description="Precision for diagnostic accuracy metric",
        z_alpha=z_alpha,
        notes=notes,
    )
