"""Sample size for time-to-event endpoints (log-rank test).

Schoenfeld-type event count on the log hazard ratio scale, 1:1 allocation::

    events = (z_alpha + z_beta)^2 / effect^2

with ``effect = -log(HR)`` for superiority, ``-log(HR) + margin`` for
non-inferiority and ``margin - |log(HR)|`` (alpha halved) for equivalence.
Margins are given on the log-HR scale.  Events are converted to enrolled
subjects by dividing by the proportion of subjects expected to have an
event during follow-up.

Validates against: R gsDesign::nEvents(), TrialSize
"""

from __future__ import annotations

import math

from pystudyplan.samplesize._common import (
    Assumptions,
    Failure,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    _require_test_hypothesis,
    _two_group_n,
    is_failure,
)

_METHOD_IDS = {
    "superiority": "time-to-event-logrank",
    "noninferiority": "noninferiority-time-to-event",
    "equivalence": "equivalence-time-to-event",
}
_DESCRIPTIONS = {
    "superiority": "Log-rank test power for time-to-event endpoint",
    "noninferiority": "Log-rank test for time-to-event endpoint (non-inferiority)",
    "equivalence": "Log-rank test for time-to-event endpoint (equivalence, TOST)",
}


def logrank_sample_size(assumptions: Assumptions) -> RawEstimate | Failure:
    """Required events and per-group subjects for a two-arm log-rank test.

    Uses ``hazard_ratio`` (treatment vs control) and
    ``event_proportion_during_follow_up`` in (0, 1].

    Returns
    -------
    RawEstimate or failure payload
        ``n`` is the per-group number of subjects (``events / proportion / 2``),
        ``events`` the unrounded total number of events.

    Examples
    --------
    >>> a = Assumptions(alpha=0.05, power=0.8, hazard_ratio=0.7,
    ...                 event_proportion_during_follow_up=0.5)
    >>> round(logrank_sample_size(a).events, 1)
    61.7
    """
    unsupported = _require_test_hypothesis(assumptions, "Time-to-event")
    if unsupported is not None:
        return unsupported

    hr = assumptions.hazard_ratio
    if hr is None:
        return IncompleteInput(("hazard_ratio",), "Hazard ratio is required.")
    if not (math.isfinite(hr) and hr > 0):
        return InvalidInput(
            "hazard_ratio", f"Hazard ratio must be a finite positive number, got {hr}.",
        )
    if assumptions.hypothesis_type == "superiority" and hr == 1.0:
        return InvalidInput("hazard_ratio", "Hazard ratio must be positive and not equal to 1.")

    out = _two_group_n(assumptions, -math.log(hr), 1.0, "log hazard ratio")
    if is_failure(out):
        return out
    events, z_alpha, z_beta, warnings = out

    proportion = assumptions.event_proportion_during_follow_up
    if proportion is None:
        return IncompleteInput(
            ("event_proportion_during_follow_up",),
            "Event proportion during follow-up is required to translate events "
            "into total sample size.",
        )
    if not (0.0 < proportion <= 1.0):
        return InvalidInput(
            "event_proportion_during_follow_up",
            f"Event proportion during follow-up must be between 0 and 1 (inclusive), "
            f"got {proportion}.",
        )

    hypothesis = assumptions.hypothesis_type
    return RawEstimate(
        n=events / proportion / 2.0,
        method_id=_METHOD_IDS[hypothesis],
        description=_DESCRIPTIONS[hypothesis],
        z_alpha=z_alpha,
        z_beta=z_beta,
        events=events,
        notes=(f"Assumes {proportion * 100:.1f}% of subjects have an event during follow-up.",),
        warnings=warnings,
    )
