"""Routing from (study design, primary endpoint) to a sample size formula.

The routing table maps each supported ``(design_id, endpoint_type)`` pair
to a selector.  A selector inspects which assumption fields are present and
returns either the formula to run or a failure payload; adding a method is
an edit to the table, not to the control flow.

Control flow of :func:`compute_sample_size`::

    select_method -> formula -> apply_adjustments -> assemble_result
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Callable
from typing import TypeVar

from pystudyplan.samplesize._adjust import apply_adjustments
from pystudyplan.samplesize._assemble import assemble_result, failure_result
from pystudyplan.samplesize._bayesian import (
    bayesian_means_sample_size,
    bayesian_proportions_sample_size,
)
from pystudyplan.samplesize._common import (
    VALID_ENDPOINT_TYPES,
    Assumptions,
    Failure,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    SampleSizeResult,
    UnsupportedDesign,
    _missing,
    is_failure,
)
from pystudyplan.samplesize._designs import design_label, get_design, is_advanced_design
from pystudyplan.samplesize._means import two_means_sample_size
from pystudyplan.samplesize._mixed import mixed_model_sample_size
from pystudyplan.samplesize._precision import (
    diagnostic_accuracy_sample_size,
    single_proportion_precision_sample_size,
)
from pystudyplan.samplesize._proportions import two_proportions_sample_size
from pystudyplan.samplesize._survival import logrank_sample_size

logger = logging.getLogger(__name__)

Formula = Callable[[Assumptions], "RawEstimate | Failure"]
Selector = Callable[[Assumptions], "Formula | Failure"]
_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

def _two_arm_binary(assumptions: Assumptions) -> Formula | Failure:
    if assumptions.prior_variance is not None:
        return bayesian_proportions_sample_size
    return two_proportions_sample_size


def _two_arm_continuous(assumptions: Assumptions) -> Formula | Failure:
    repeated = (
        assumptions.number_of_repeated_measures is not None
        or assumptions.intraclass_correlation is not None
    )
    if repeated and assumptions.prior_variance is not None:
        return UnsupportedDesign(
            assumptions.design_id,
            "continuous",
            "Combined repeated-measures and Bayesian prior calculations are not modeled; "
            "consult a statistician.",
        )
    if assumptions.prior_variance is not None:
        return bayesian_means_sample_size
    if repeated:
        return mixed_model_sample_size
    return two_means_sample_size


def _two_arm_time_to_event(assumptions: Assumptions) -> Formula | Failure:
    return logrank_sample_size


def _missing_precision_target(assumptions: Assumptions) -> tuple[str, ...]:
    return _missing(assumptions, "expected_proportion", "precision")


def _cross_sectional(endpoint_type: str) -> Selector:
    def select(assumptions: Assumptions) -> Formula | Failure:
        if (
            endpoint_type == "binary"
            and assumptions.expected_control_event_rate is not None
            and assumptions.expected_treatment_event_rate is not None
        ):
            return two_proportions_sample_size
        if (
            endpoint_type == "continuous"
            and assumptions.expected_mean_control is not None
            and assumptions.expected_mean_treatment is not None
        ):
            return two_means_sample_size
        missing = _missing_precision_target(assumptions)
        if not missing:
            return single_proportion_precision_sample_size
        return IncompleteInput(
            missing,
            "Cross-sectional designs require group parameters or a prevalence "
            "with precision target.",
        )

    return select


def _precision_only(message: str) -> Selector:
    def select(assumptions: Assumptions) -> Formula | Failure:
        missing = _missing_precision_target(assumptions)
        if not missing:
            return single_proportion_precision_sample_size
        return IncompleteInput(missing, message)

    return select


def _diagnostic(assumptions: Assumptions) -> Formula | Failure:
    return diagnostic_accuracy_sample_size


def _build_routing_table() -> dict[tuple[str, str], Selector]:
    table: dict[tuple[str, str], Selector] = {}

    for design in ("rct-2arm-parallel", "prospective-cohort", "retrospective-cohort"):
        table[design, "binary"] = _two_arm_binary
        table[design, "continuous"] = _two_arm_continuous
        table[design, "time-to-event"] = _two_arm_time_to_event

    single_arm = _precision_only(
        "Single-arm designs require expected response proportion and desired precision."
    )
    registry = _precision_only(
        "Registry sample size is typically feasibility-driven and not auto-calculated "
        "without a key proportion."
    )
    for endpoint in VALID_ENDPOINT_TYPES:
        table["cross-sectional", endpoint] = _cross_sectional(endpoint)
        table["single-arm", endpoint] = single_arm
        table["registry", endpoint] = registry
        table["diagnostic-accuracy", endpoint] = _diagnostic

    return table


ROUTING_TABLE: dict[tuple[str, str], Selector] = _build_routing_table()

# Designs that are never automated, with the reason shown to the user.
_NOT_AUTOMATED = {
    "case-control": "Automated case-control sample size not implemented; consult a statistician.",
}


def _routed(value: _T, design_id: str, endpoint_type: str) -> _T:
    """Stamp the routed design and endpoint onto an ``UnsupportedDesign``.

    Formulas only see the assumptions, so an ``UnsupportedDesign`` built
    inside one carries whatever ``design_id`` the assumptions held.
    """
    if isinstance(value, UnsupportedDesign):
        return dataclasses.replace(value, design_id=design_id, endpoint_type=endpoint_type)
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def select_method(
    design_id: str | None,
    endpoint_type: str | None,
    assumptions: Assumptions,
) -> Formula | Failure:
    """Choose the formula for a design / endpoint pair, or fail early.

    Returns
    -------
    callable or failure payload
        The formula to apply to *assumptions*, or an ``IncompleteInput`` /
        ``UnsupportedDesign`` explaining why no formula applies.
    """
    if not design_id:
        return IncompleteInput(
            ("design_id",), "Study design is required before sample size calculations.",
        )
    if not endpoint_type:
        return IncompleteInput(
            ("primary_endpoint_type",),
            "Primary endpoint is required before sample size calculations.",
        )
    if is_advanced_design(design_id):
        return UnsupportedDesign(
            design_id, endpoint_type,
            "Advanced designs are not supported in this automation step.",
        )
    if design_id in _NOT_AUTOMATED:
        return UnsupportedDesign(design_id, endpoint_type, _NOT_AUTOMATED[design_id])
    if get_design(design_id) is None:
        return UnsupportedDesign(
            design_id, endpoint_type,
            f"No sample size support configured for design {design_id}.",
        )

    selector = ROUTING_TABLE.get((design_id, endpoint_type))
    if selector is None:
        return UnsupportedDesign(
            design_id, endpoint_type,
            f"No supported sample size method mapped for design {design_label(design_id)} "
            f"with primary endpoint type {endpoint_type}.",
        )
    return _routed(selector(assumptions), design_id, endpoint_type)


def _alignment_warnings(
    design_id: str,
    endpoint_type: str,
    assumptions: Assumptions,
) -> tuple[str, ...]:
    warnings: list[str] = []
    if assumptions.design_id is not None and assumptions.design_id != design_id:
        warnings.append("Assumptions designId does not match the study specification design.")
    if (
        assumptions.primary_endpoint_type is not None
        and assumptions.primary_endpoint_type != endpoint_type
    ):
        warnings.append(
            "Primary endpoint type in assumptions does not match study specification."
        )
    return tuple(warnings)


def compute_sample_size(
    study_design_id: str | None,
    primary_endpoint_type: str | None,
    assumptions: Assumptions,
) -> SampleSizeResult:
    """Required sample size for a study, or a structured explanation why not.

    Parameters
    ----------
    study_design_id : str or None
        Design id from the study specification (e.g. ``'rct-2arm-parallel'``).
    primary_endpoint_type : str or None
        ``'binary'``, ``'continuous'``, ``'time-to-event'``, ``'diagnostic'``,
        ``'ordinal'`` or ``'count'``.
    assumptions : Assumptions
        Final merged assumptions.  A ``design_id`` / ``primary_endpoint_type``
        in the assumptions that disagrees with the study specification only
        adds a warning; routing follows the study specification.

    Returns
    -------
    SampleSizeResult
        Never raises for bad or missing assumption values; those are reported
        through ``status`` and ``warnings``.

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, expected_control_event_rate=0.30,
    ...                 expected_treatment_event_rate=0.18)
    >>> r = compute_sample_size("rct-2arm-parallel", "binary", a)
    >>> r.per_group_sample_size, r.total_sample_size
    (195, 390)
    """
    routing_warnings: tuple[str, ...] = ()
    if study_design_id and primary_endpoint_type:
        routing_warnings = _alignment_warnings(
            study_design_id, primary_endpoint_type, assumptions,
        )

    formula = select_method(study_design_id, primary_endpoint_type, assumptions)
    if is_failure(formula):
        logger.debug(
            "no method for design=%s endpoint=%s: %s",
            study_design_id, primary_endpoint_type, formula.status.value,
        )
        return failure_result(formula, assumptions, routing_warnings)

    raw = _routed(formula(assumptions), study_design_id, primary_endpoint_type)
    if is_failure(raw):
        logger.debug("%s failed: %s", formula.__name__, raw.message)
        return failure_result(raw, assumptions, routing_warnings)

    logger.debug("design=%s endpoint=%s -> %s", study_design_id, primary_endpoint_type, raw.method_id)
    adjusted = apply_adjustments(raw.n, assumptions)
    if not (math.isfinite(adjusted.estimate) and adjusted.estimate > 0):
        failure = InvalidInput(
            None,
            f"Assumptions yield a sample size that is not a finite positive number "
            f"({adjusted.estimate}).",
        )
        return failure_result(failure, assumptions, adjusted.warnings + routing_warnings)
    return assemble_result(raw, adjusted, assumptions, routing_warnings)
