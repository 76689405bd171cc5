"""Sample size inflation applied after a formula's raw estimate.

Three steps, always in this order:

1. sequential-design inflation (interim analyses, alpha spending)
2. dropout inflation
3. cluster design effect

Each step is a pure function ``(estimate, assumptions) -> Adjustment``; the
pipeline folds them over the raw estimate.  Applied steps leave a note with
the exact factor used, skipped steps with unusable inputs leave a warning.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from functools import reduce

from pystudyplan.samplesize._common import Assumptions

logger = logging.getLogger(__name__)

# Inflation per additional look: factor = 1 + c * (k - 1), k = interim + 1
_SPENDING_COEFFICIENTS = {
    "obrien-fleming": 0.01,
    "pocock": 0.05,
    "lan-demets": 0.03,
}
_SPENDING_LABELS = {
    "obrien-fleming": "O'Brien-Fleming",
    "pocock": "Pocock",
    "lan-demets": "Lan-DeMets",
}
_DEFAULT_SPENDING = "obrien-fleming"

_DEFAULT_CLUSTER_EFFECT = 1.0


@dataclass(frozen=True)
class Adjustment:
    """Estimate after one or more adjustment steps."""

    estimate: float
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


AdjustmentStep = Callable[[float, Assumptions], Adjustment]


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def sequential_inflation(estimate: float, assumptions: Assumptions) -> Adjustment:
    """Inflate for interim analyses under the named alpha-spending function."""
    interim = assumptions.number_of_interim_analyses
    if interim is None or interim == 0:
        return Adjustment(estimate)
    if not math.isfinite(interim) or interim < 0:
        return Adjustment(
            estimate,
            warnings=(
                f"Number of interim analyses must be a finite non-negative number, "
                f"got {interim}. Ignored.",
            ),
        )

    warnings: tuple[str, ...] = ()
    name = assumptions.alpha_spending_function
    if name is None:
        key = _DEFAULT_SPENDING
        warnings = (
            "No alpha-spending function given for the interim analyses; "
            "assumed O'Brien-Fleming.",
        )
    else:
        key = name.strip().lower()
        if key not in _SPENDING_COEFFICIENTS:
            return Adjustment(
                estimate,
                warnings=(
                    f"Unknown alpha-spending function {name!r}; expected one of "
                    f"{', '.join(_SPENDING_LABELS.values())}. Sequential inflation ignored.",
                ),
            )

    looks = interim + 1
    factor = 1.0 + _SPENDING_COEFFICIENTS[key] * (looks - 1)
    note = (
        f"Inflated by {factor:.2f} for {interim} interim "
        f"{'analysis' if interim == 1 else 'analyses'} "
        f"({_SPENDING_LABELS[key]} alpha spending, {looks} looks)."
    )
    return Adjustment(estimate * factor, notes=(note,), warnings=warnings)


def dropout_inflation(estimate: float, assumptions: Assumptions) -> Adjustment:
    """Divide by the retention fraction ``1 - dropout_rate``."""
    rate = assumptions.dropout_rate
    if rate is None:
        return Adjustment(estimate)
    if not (0.0 < rate < 1.0):
        return Adjustment(
            estimate,
            warnings=("Dropout rate must be between 0 and 1 (exclusive). Ignored.",),
        )
    return Adjustment(
        estimate / (1.0 - rate),
        notes=(f"Adjusted for anticipated dropout of {rate * 100:.1f}%.",),
    )


def cluster_design_effect(estimate: float, assumptions: Assumptions) -> Adjustment:
    """Multiply by the cluster design effect."""
    deff = assumptions.cluster_design_effect
    if deff is None:
        return Adjustment(estimate)
    if not (math.isfinite(deff) and deff > 0):
        return Adjustment(
            estimate,
            warnings=(
                f"Cluster design effect must be finite and greater than 0, got {deff}. Ignored.",
            ),
        )
    if deff == _DEFAULT_CLUSTER_EFFECT:
        return Adjustment(estimate)
    return Adjustment(
        estimate * deff,
        notes=(f"Adjusted for cluster design effect of {deff:.2f}.",),
    )


ADJUSTMENT_STEPS: tuple[AdjustmentStep, ...] = (
    sequential_inflation,
    dropout_inflation,
    cluster_design_effect,
)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def apply_adjustments(
    estimate: float,
    assumptions: Assumptions,
    steps: tuple[AdjustmentStep, ...] = ADJUSTMENT_STEPS,
) -> Adjustment:
    """Fold *steps* over *estimate*, accumulating notes and warnings.

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, dropout_rate=0.2)
    >>> apply_adjustments(100.0, a).estimate
    125.0
    """

    def _step(acc: Adjustment, step: AdjustmentStep) -> Adjustment:
        out = step(acc.estimate, assumptions)
        if out.estimate != acc.estimate:
            logger.debug(
                "%s: %.6g -> %.6g", step.__name__, acc.estimate, out.estimate,
            )
        return Adjustment(
            out.estimate,
            notes=acc.notes + out.notes,
            warnings=acc.warnings + out.warnings,
        )

    return reduce(_step, steps, Adjustment(estimate))
