"""Sensitivity of the required sample size to one assumption.

Re-runs :func:`compute_sample_size` with a single assumption field swept
over a grid of values, e.g. dropout rates or treatment event rates, so a
planner can see how fragile the headline number is.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pystudyplan.samplesize._common import Assumptions, SampleSizeResult
from pystudyplan.samplesize._router import compute_sample_size

# Assumption fields that cannot be swept over a numeric grid
_NON_NUMERIC_FIELDS = (
    "two_sided",
    "hypothesis_type",
    "design_id",
    "primary_endpoint_type",
    "target_metric",
    "alpha_spending_function",
)
_INTEGER_FIELDS = ("number_of_interim_analyses", "number_of_repeated_measures")


@dataclass(frozen=True)
class SensitivityResult:
    """Sample sizes across a sweep of one assumption field.

    Sizes are ``NaN`` where the calculation did not succeed; the matching
    entry of ``results`` carries the status and warnings.
    """

    field: str
    values: NDArray[np.floating]
    total_sample_size: NDArray[np.floating]  # shape (n_values,)
    per_group_sample_size: NDArray[np.floating]
    statuses: tuple[str, ...]
    results: tuple[SampleSizeResult, ...]

    @property
    def n_ok(self) -> int:
        """Number of values for which the calculation succeeded."""
        return int(np.sum(~np.isnan(self.total_sample_size)))

    def summary(self) -> str:
        """Human-readable table."""
        lines = [f"Sensitivity to {self.field}", "=" * 40]
        for value, total, status in zip(self.values, self.total_sample_size, self.statuses):
            shown = f"{int(total)}" if not np.isnan(total) else status
            lines.append(f"{value:>12.6g}  {shown}")
        return "\n".join(lines)


def sample_size_sensitivity(
    study_design_id: str,
    primary_endpoint_type: str,
    assumptions: Assumptions,
    field: str,
    values: Iterable[float],
) -> SensitivityResult:
    """Sweep *field* over *values* and recompute the sample size each time.

    Parameters
    ----------
    study_design_id, primary_endpoint_type : str
        As for :func:`compute_sample_size`.
    assumptions : Assumptions
        Baseline assumptions; only *field* varies.
    field : str
        Name of a numeric ``Assumptions`` field (snake_case).
    values : iterable of float
        Values to substitute.

    Returns
    -------
    SensitivityResult

    Raises
    ------
    ValueError
        If *field* is not a sweepable ``Assumptions`` field or *values* is
        empty or not 1-D.

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, expected_control_event_rate=0.30,
    ...                 expected_treatment_event_rate=0.18)
    >>> s = sample_size_sensitivity("rct-2arm-parallel", "binary", a,
    ...                             "dropout_rate", [0.1, 0.2])
    >>> s.total_sample_size.tolist()
    [434.0, 488.0]
    """
    names = {f.name for f in dataclasses.fields(Assumptions)}
    if field not in names or field in _NON_NUMERIC_FIELDS:
        raise ValueError(f"field must be a numeric Assumptions field, got {field!r}")

    grid = np.asarray(list(values), dtype=np.float64)
    if grid.ndim != 1 or grid.size == 0:
        raise ValueError("values must be a non-empty 1-D sequence")

    totals = np.full(grid.size, np.nan)
    per_group = np.full(grid.size, np.nan)
    results: list[SampleSizeResult] = []

    for i, value in enumerate(grid):
        value = float(value)
        # whole numbers go in as int; anything else is left for the formula to reject
        if field in _INTEGER_FIELDS and value.is_integer():
            value = int(value)
        r = compute_sample_size(
            study_design_id, primary_endpoint_type, assumptions.replace(**{field: value}),
        )
        results.append(r)
        if r.total_sample_size is not None:
            totals[i] = r.total_sample_size
        if r.per_group_sample_size is not None:
            per_group[i] = r.per_group_sample_size

    return SensitivityResult(
        field=field,
        values=grid,
        total_sample_size=totals,
        per_group_sample_size=per_group,
        statuses=tuple(r.status.value for r in results),
        results=tuple(results),
    )
