"""Study design and sample size method catalogues."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StudyDesign:
    """A study design known to the planner."""

    id: str
    label: str
    category: str  # 'interventional', 'observational', 'registry', 'diagnostic'
    is_advanced: bool = False


@dataclass(frozen=True)
class SampleSizeMethod:
    """A sample size method the engine can report as ``method_id``."""

    id: str
    label: str
    per_group: bool  # two-arm method (total = 2 * per group)


STUDY_DESIGNS: tuple[StudyDesign, ...] = (
    StudyDesign("prospective-cohort", "Prospective Cohort", "observational"),
    StudyDesign("retrospective-cohort", "Retrospective Cohort", "observational"),
    StudyDesign("cross-sectional", "Cross-sectional", "observational"),
    StudyDesign("case-control", "Case-control", "observational"),
    StudyDesign("registry", "Registry", "registry"),
    StudyDesign("rct-2arm-parallel", "RCT – 2 Arm Parallel", "interventional"),
    StudyDesign("single-arm", "Single Arm", "interventional"),
    StudyDesign("diagnostic-accuracy", "Diagnostic Accuracy", "diagnostic"),
)

ADVANCED_STUDY_DESIGNS: tuple[StudyDesign, ...] = (
    StudyDesign("cluster-rct", "Cluster RCT", "interventional", is_advanced=True),
    StudyDesign("noninferiority-rct", "Non-inferiority RCT", "interventional", is_advanced=True),
    StudyDesign("quasi-experimental", "Quasi-experimental", "interventional", is_advanced=True),
    StudyDesign("adaptive", "Adaptive", "interventional", is_advanced=True),
)

SAMPLE_SIZE_METHODS: tuple[SampleSizeMethod, ...] = (
    SampleSizeMethod("two-proportions", "Two Proportions", True),
    SampleSizeMethod("noninferiority-proportions", "Non-inferiority Proportions", True),
    SampleSizeMethod("equivalence-proportions", "Equivalence Proportions (TOST)", True),
    SampleSizeMethod("two-means", "Two Means", True),
    SampleSizeMethod("noninferiority-means", "Non-inferiority Means", True),
    SampleSizeMethod("equivalence-means", "Equivalence Means (TOST)", True),
    SampleSizeMethod("single-proportion-precision", "Single Proportion Precision", False),
    SampleSizeMethod("time-to-event-logrank", "Time-to-event Log-rank", True),
    SampleSizeMethod("noninferiority-time-to-event", "Non-inferiority Time-to-event", True),
    SampleSizeMethod("equivalence-time-to-event", "Equivalence Time-to-event (TOST)", True),
    SampleSizeMethod("diagnostic-accuracy", "Diagnostic Accuracy", False),
    SampleSizeMethod("mixed-model-lmm", "Linear Mixed Model (LMM)", True),
    SampleSizeMethod("bayesian-proportions", "Bayesian Sample Size (Proportions)", True),
    SampleSizeMethod("bayesian-means", "Bayesian Sample Size (Means)", True),
)

_DESIGN_MAP = {d.id: d for d in STUDY_DESIGNS + ADVANCED_STUDY_DESIGNS}
_METHOD_MAP = {m.id: m for m in SAMPLE_SIZE_METHODS}


def get_design(design_id: str) -> StudyDesign | None:
    """Look up a design by id (``None`` if unknown)."""
    return _DESIGN_MAP.get(design_id)


def design_label(design_id: str) -> str:
    """Display label for *design_id*, falling back to the id itself."""
    design = _DESIGN_MAP.get(design_id)
    return design.label if design is not None else design_id


def is_advanced_design(design_id: str) -> bool:
    design = _DESIGN_MAP.get(design_id)
    return design is not None and design.is_advanced


def get_method(method_id: str) -> SampleSizeMethod:
    """Look up a method by id.

    Raises
    ------
    ValueError
        If *method_id* is not in the catalogue.
    """
    try:
        return _METHOD_MAP[method_id]
    except KeyError:
        raise ValueError(f"Unknown sample size method {method_id!r}") from None
