"""Shared types and helpers for sample size calculations."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pystudyplan.samplesize._normal import z_from_alpha, z_from_power

VALID_HYPOTHESIS_TYPES = ("superiority", "noninferiority", "equivalence", "estimation")
VALID_ENDPOINT_TYPES = (
    "binary", "continuous", "time-to-event", "diagnostic", "ordinal", "count",
)
VALID_TARGET_METRICS = ("sensitivity", "specificity", "both")


# ---------------------------------------------------------------------------
# Assumptions
# ---------------------------------------------------------------------------

# camelCase keys whose spelling is not the mechanical conversion
_CAMEL_OVERRIDES = {"assumed_sd": "assumedSD"}


def _camel(name: str) -> str:
    if name in _CAMEL_OVERRIDES:
        return _CAMEL_OVERRIDES[name]
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True)
class Assumptions:
    """Merged numeric assumptions for one sample size calculation.

    Only ``alpha`` and ``power`` are always required; every other numeric
    field is consumed by the methods that need it.  Out-of-domain values are
    accepted here and reported by the calculation as ``invalid-input``.

    Rates, means, and hazard ratios are compared as control minus treatment
    (``p1 - p2`` with ``p1`` the control rate), so a positive difference
    favours treatment.  Non-inferiority and equivalence margins for
    time-to-event endpoints are on the log hazard ratio scale.
    """

    alpha: float
    power: float
    two_sided: bool = True
    hypothesis_type: str = "superiority"
    design_id: str | None = None
    primary_endpoint_type: str | None = None

    # binary
    expected_control_event_rate: float | None = None
    expected_treatment_event_rate: float | None = None
    # continuous
    expected_mean_control: float | None = None
    expected_mean_treatment: float | None = None
    assumed_sd: float | None = None
    # time-to-event
    hazard_ratio: float | None = None
    event_proportion_during_follow_up: float | None = None
    # precision / estimation
    expected_proportion: float | None = None
    precision: float | None = None  # CI half-width
    # diagnostic accuracy
    expected_sensitivity: float | None = None
    expected_specificity: float | None = None
    target_metric: str | None = None
    # margins
    noninferiority_margin: float | None = None
    equivalence_margin: float | None = None
    # adjustments
    dropout_rate: float | None = None
    cluster_design_effect: float | None = None
    number_of_interim_analyses: int | None = None
    alpha_spending_function: str | None = None
    # repeated measures
    number_of_repeated_measures: int | None = None
    intraclass_correlation: float | None = None
    # Bayesian blend
    prior_variance: float | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Assumptions:
        """Build assumptions from a plain mapping.

        Keys may be snake_case field names or their camelCase spelling
        (``expectedControlEventRate``, ``twoSided``, ``assumedSD``).
        ``None`` values are treated as absent.

        Raises
        ------
        ValueError
            On unknown keys, duplicate spellings of one field, or when
            ``alpha`` / ``power`` are missing.
        """
        by_key: dict[str, str] = {}
        for f in dataclasses.fields(cls):
            by_key[f.name] = f.name
            by_key[_camel(f.name)] = f.name

        unknown = sorted(k for k in mapping if k not in by_key)
        if unknown:
            raise ValueError(f"Unknown assumption field(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, value in mapping.items():
            if value is None:
                continue
            name = by_key[key]
            if name in kwargs:
                raise ValueError(f"Assumption field {name!r} given more than once")
            kwargs[name] = value

        missing = [name for name in ("alpha", "power") if name not in kwargs]
        if missing:
            raise ValueError(f"Missing required assumption field(s): {', '.join(missing)}")

        return cls(**kwargs)

    def to_mapping(self) -> dict[str, Any]:
        """camelCase mapping of the populated fields."""
        return {
            _camel(f.name): getattr(self, f.name)
            for f in dataclasses.fields(self)
            if getattr(self, f.name) is not None
        }

    def replace(self, **changes: Any) -> Assumptions:
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)


# ---------------------------------------------------------------------------
# Status and failure payloads
# ---------------------------------------------------------------------------

class SampleSizeStatus(str, Enum):
    """Outcome of a sample size calculation."""

    OK = "ok"
    INCOMPLETE_INPUT = "incomplete-input"
    INVALID_INPUT = "invalid-input"
    UNSUPPORTED_DESIGN = "unsupported-design"


@dataclass(frozen=True)
class IncompleteInput:
    """A required assumption was not supplied."""

    missing: tuple[str, ...]
    message: str

    @property
    def status(self) -> SampleSizeStatus:
        return SampleSizeStatus.INCOMPLETE_INPUT


@dataclass(frozen=True)
class InvalidInput:
    """A supplied assumption is outside its mathematical domain."""

    parameter: str | None
    message: str

    @property
    def status(self) -> SampleSizeStatus:
        return SampleSizeStatus.INVALID_INPUT


@dataclass(frozen=True)
class UnsupportedDesign:
    """No modeled formula for this design / endpoint / hypothesis."""

    design_id: str | None
    endpoint_type: str | None
    message: str

    @property
    def status(self) -> SampleSizeStatus:
        return SampleSizeStatus.UNSUPPORTED_DESIGN


Failure = Union[IncompleteInput, InvalidInput, UnsupportedDesign]


# ---------------------------------------------------------------------------
# Raw (pre-adjustment) estimate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RawEstimate:
    """Unrounded output of a formula, before adjustments.

    ``n`` is per group for two-arm methods (see the method catalogue),
    otherwise the single total.  ``z_alpha`` / ``z_beta`` are the values
    the formula actually used; ``z_beta`` is ``None`` for precision
    (estimation) methods.
    """

    n: float
    method_id: str
    description: str
    z_alpha: float
    z_beta: float | None = None
    events: float | None = None
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SampleSizeResult:
    """Result of :func:`compute_sample_size`.

    ``status`` is ``ok`` exactly when at least one of the numeric outputs is
    present.  Every other status carries its ``failure`` payload and at least
    one warning explaining why.  ``warnings`` must be shown to the user even
    when the status is ``ok``; ``notes`` trace each adjustment applied.
    """

    status: SampleSizeStatus
    assumptions: Assumptions
    method_id: str | None = None
    description: str | None = None
    total_sample_size: int | None = None
    per_group_sample_size: int | None = None
    events_required: int | None = None
    achieved_power: float | None = None
    warnings: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()
    failure: Failure | None = None

    def __post_init__(self) -> None:
        has_output = any(
            v is not None
            for v in (self.total_sample_size, self.per_group_sample_size, self.events_required)
        )
        if (self.status is SampleSizeStatus.OK) != has_output:
            raise ValueError(
                f"status {self.status.value!r} is inconsistent with the numeric outputs"
            )
        if self.status is not SampleSizeStatus.OK:
            if not self.warnings:
                raise ValueError(f"status {self.status.value!r} requires at least one warning")
            if self.failure is None or self.failure.status is not self.status:
                raise ValueError(f"status {self.status.value!r} requires a matching failure")

    @property
    def ok(self) -> bool:
        return self.status is SampleSizeStatus.OK

    def with_warnings(self, extra: tuple[str, ...]) -> SampleSizeResult:
        """Copy with *extra* warnings appended."""
        if not extra:
            return self
        return dataclasses.replace(self, warnings=self.warnings + tuple(extra))

    def to_mapping(self) -> dict[str, Any]:
        """camelCase mapping for document generators."""
        out: dict[str, Any] = {"status": self.status.value}
        for key, value in (
            ("methodId", self.method_id),
            ("description", self.description),
            ("totalSampleSize", self.total_sample_size),
            ("perGroupSampleSize", self.per_group_sample_size),
            ("eventsRequired", self.events_required),
            ("achievedPower", self.achieved_power),
        ):
            if value is not None:
                out[key] = value
        out["assumptions"] = self.assumptions.to_mapping()
        out["warnings"] = list(self.warnings)
        out["notes"] = list(self.notes)
        return out

    def summary(self) -> str:
        """Human-readable summary."""
        lines = ["Sample size calculation", "=" * 40, f"Status        : {self.status.value}"]
        if self.method_id is not None:
            lines.append(f"Method        : {self.method_id}")
        if self.description:
            lines.append(f"Description   : {self.description}")
        if self.per_group_sample_size is not None:
            lines.append(f"n per group   : {self.per_group_sample_size}")
        if self.total_sample_size is not None:
            lines.append(f"n total       : {self.total_sample_size}")
        if self.events_required is not None:
            lines.append(f"events        : {self.events_required}")
        if self.achieved_power is not None:
            lines.append(f"power         : {self.achieved_power:.4f}")
        lines.append(f"alpha         : {self.assumptions.alpha}")
        for note in self.notes:
            lines.append(f"NOTE: {note}")
        for warning in self.warnings:
            lines.append(f"WARNING: {warning}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Shared validation
# ---------------------------------------------------------------------------

def _missing(assumptions: Assumptions, *names: str) -> tuple[str, ...]:
    """Names among *names* whose value is ``None``."""
    return tuple(name for name in names if getattr(assumptions, name) is None)


def _is_probability(value: float) -> bool:
    """True for values strictly inside (0, 1)."""
    return 0.0 < value < 1.0


def _critical_values(
    assumptions: Assumptions,
    *,
    halve_alpha: bool = False,
) -> tuple[float, float] | InvalidInput:
    """``(z_alpha, z_beta)`` for a hypothesis test, or an ``InvalidInput``.

    ``halve_alpha`` is used by two one-sided tests (TOST).
    """
    # range check on the nominal alpha, before any TOST halving
    z_alpha = z_from_alpha(assumptions.alpha, assumptions.two_sided)
    if halve_alpha and math.isfinite(z_alpha):
        z_alpha = z_from_alpha(assumptions.alpha / 2.0, assumptions.two_sided)
    z_beta = z_from_power(assumptions.power)
    if not (math.isfinite(z_alpha) and math.isfinite(z_beta)):
        return InvalidInput(
            parameter="alpha" if not math.isfinite(z_alpha) else "power",
            message="Alpha or power inputs are outside supported ranges.",
        )
    return z_alpha, z_beta


def _margin_denominator(
    difference: float,
    assumptions: Assumptions,
    scale: str,
) -> tuple[float, bool, tuple[str, ...]] | Failure:
    """Effect size on which a two-group formula divides.

    Parameters
    ----------
    difference : float
        Assumed control-minus-treatment difference on the analysis scale.
    assumptions : Assumptions
    scale : str
        Label used in messages (e.g. ``"event rates"``).

    Returns
    -------
    tuple
        ``(effect, halve_alpha, warnings)`` where the sample size is
        proportional to ``1 / effect**2``; or a failure payload.
    """
    hypothesis = assumptions.hypothesis_type

    if hypothesis == "superiority":
        if abs(difference) < 1e-9:
            return InvalidInput(None, f"The assumed {scale} must differ to compute sample size.")
        return abs(difference), False, ()

    if hypothesis == "noninferiority":
        margin = assumptions.noninferiority_margin
        if margin is None:
            return IncompleteInput(
                ("noninferiority_margin",),
                "A non-inferiority margin is required for non-inferiority hypotheses.",
            )
        if not (math.isfinite(margin) and margin > 0):
            return InvalidInput(
                "noninferiority_margin",
                f"Non-inferiority margin must be a finite positive number, got {margin}.",
            )
        effect = difference + margin
        if not effect > 0:
            return InvalidInput(
                "noninferiority_margin",
                f"Non-inferiority margin {margin} is too large relative to the assumed "
                f"difference in {scale} ({difference:.4g}); the effective difference "
                f"must be positive.",
            )
        return effect, False, ()

    if hypothesis == "equivalence":
        margin = assumptions.equivalence_margin
        if margin is None:
            return IncompleteInput(
                ("equivalence_margin",),
                "An equivalence margin is required for equivalence hypotheses.",
            )
        if not (math.isfinite(margin) and margin > 0):
            return InvalidInput(
                "equivalence_margin",
                f"Equivalence margin must be a finite positive number, got {margin}.",
            )
        warnings: tuple[str, ...] = ()
        if abs(difference) > margin:
            warnings = (
                f"The assumed difference in {scale} ({abs(difference):.4g}) exceeds the "
                f"equivalence margin ({margin}); equivalence may be unachievable.",
            )
        effect = margin - abs(difference)
        if abs(effect) < 1e-12:
            return InvalidInput(
                "equivalence_margin",
                f"Equivalence margin {margin} equals the assumed difference in {scale}; "
                f"sample size is undefined.",
            )
        return abs(effect), True, warnings

    return UnsupportedDesign(
        assumptions.design_id,
        assumptions.primary_endpoint_type,
        f"Hypothesis type {hypothesis!r} is not modeled for two-group comparisons of {scale}.",
    )


_FAILURE_TYPES = (IncompleteInput, InvalidInput, UnsupportedDesign)
_TEST_HYPOTHESES = ("superiority", "noninferiority", "equivalence")


def is_failure(value: object) -> bool:
    """True if *value* is one of the failure payloads."""
    return isinstance(value, _FAILURE_TYPES)


def _require_test_hypothesis(assumptions: Assumptions, what: str) -> UnsupportedDesign | None:
    """``UnsupportedDesign`` unless the hypothesis type is a two-group test."""
    if assumptions.hypothesis_type in _TEST_HYPOTHESES:
        return None
    return UnsupportedDesign(
        assumptions.design_id,
        assumptions.primary_endpoint_type,
        f"{what} calculations require a superiority, non-inferiority or equivalence "
        f"hypothesis; {assumptions.hypothesis_type!r} is not supported.",
    )


def _require_estimation(assumptions: Assumptions, what: str) -> UnsupportedDesign | None:
    """``UnsupportedDesign`` unless the hypothesis type is estimation."""
    if assumptions.hypothesis_type == "estimation":
        return None
    return UnsupportedDesign(
        assumptions.design_id,
        assumptions.primary_endpoint_type,
        f"{what} calculations require estimation hypothesis type.",
    )


def _two_group_n(
    assumptions: Assumptions,
    difference: float,
    variance: float,
    scale: str,
) -> tuple[float, float, float, tuple[str, ...]] | Failure:
    """Unrounded ``(z_alpha + z_beta)^2 * variance / effect^2``.

    Returns ``(n, z_alpha, z_beta, warnings)`` or a failure payload.  The
    effect is the plain difference, the margin-shifted difference, or the
    TOST distance to the margin depending on the hypothesis type.
    """
    margin = _margin_denominator(difference, assumptions, scale)
    if is_failure(margin):
        return margin
    effect, halve_alpha, warnings = margin

    z = _critical_values(assumptions, halve_alpha=halve_alpha)
    if is_failure(z):
        return z
    z_alpha, z_beta = z

    n = (z_alpha + z_beta) ** 2 * variance / (effect * effect)
    return n, z_alpha, z_beta, warnings
