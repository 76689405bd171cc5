"""Packaging of raw estimates and failures into ``SampleSizeResult``."""

from __future__ import annotations

import dataclasses
import math

from scipy.stats import norm

from pystudyplan.samplesize._adjust import Adjustment
from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    RawEstimate,
    SampleSizeResult,
    SampleSizeStatus,
)
from pystudyplan.samplesize._designs import get_method


def _echo(assumptions: Assumptions) -> Assumptions:
    """Fresh copy of the assumptions for the result."""
    return dataclasses.replace(assumptions)


def _achieved_power(raw: RawEstimate) -> float | None:
    """Power attained with ``ceil(raw.n)`` evaluable subjects.

    All hypothesis-test formulas have ``n proportional to (z_alpha + z_beta)^2``,
    so at ``n'`` the attainable ``z_beta'`` is
    ``sqrt(n'/n) * (z_alpha + z_beta) - z_alpha``.
    """
    if raw.z_beta is None or not raw.n > 0:
        return None
    evaluable = math.ceil(raw.n)
    z = math.sqrt(evaluable / raw.n) * (raw.z_alpha + raw.z_beta) - raw.z_alpha
    return float(norm.cdf(z))


def assemble_result(
    raw: RawEstimate,
    adjusted: Adjustment,
    assumptions: Assumptions,
    warnings: tuple[str, ...] = (),
) -> SampleSizeResult:
    """Round and package a successful calculation.

    Two-arm methods report ``ceil(adjusted)`` per group and twice that as
    the total; single-group methods report ``ceil(adjusted)`` as the total.
    Warnings are ordered formula, adjustments, then *warnings* (routing).
    """
    method = get_method(raw.method_id)

    per_group: int | None = None
    if method.per_group:
        per_group = math.ceil(adjusted.estimate)
        total = 2 * per_group
    else:
        total = math.ceil(adjusted.estimate)

    events = math.ceil(raw.events) if raw.events is not None else None

    return SampleSizeResult(
        status=SampleSizeStatus.OK,
        assumptions=_echo(assumptions),
        method_id=raw.method_id,
        description=raw.description,
        total_sample_size=total,
        per_group_sample_size=per_group,
        events_required=events,
        achieved_power=_achieved_power(raw),
        warnings=raw.warnings + adjusted.warnings + tuple(warnings),
        notes=raw.notes + adjusted.notes,
    )


def failure_result(
    failure: Failure,
    assumptions: Assumptions,
    warnings: tuple[str, ...] = (),
) -> SampleSizeResult:
    """Package a failure; its message is always the first warning."""
    return SampleSizeResult(
        status=failure.status,
        assumptions=_echo(assumptions),
        warnings=(failure.message,) + tuple(warnings),
        failure=failure,
    )
