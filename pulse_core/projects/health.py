# pulse_core/projects/health.py
"""
Project health scoring.

recompute() is a pure function of (project, events, now): it reads plain
attributes and returns a HealthResult; persisting the result is the caller's
job (see ProjectService.refresh_health).

Weights, baselines and penalties are fixed. Rounding is half-up and happens
in exactly two places: the expected progress and the final score.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from django.utils import timezone

from pulse_core.ledger.constants import EventType, RiskStatus
from pulse_core.projects.models import ProjectStatus

SATISFACTION_WEIGHT = 0.4
CONFIDENCE_WEIGHT = 0.3
SCHEDULE_WEIGHT = 0.3

# Used when no feedback / check-in rating exists yet
NEUTRAL_BASELINE = 70

OPEN_RISK_PENALTY = 10
FLAGGED_ISSUE_PENALTY = 5

ON_TRACK_THRESHOLD = 80
AT_RISK_THRESHOLD = 60

_ONE_MS = timedelta(milliseconds=1)


@dataclass(frozen=True)
class HealthResult:
    health_score: int
    status: str

    # Inputs to the score, for logging and the recompute command
    client_satisfaction: float
    employee_confidence: float
    expected_progress: int
    schedule_score: int
    open_risks: int
    flagged_issues: int
    risk_penalty: int


def round_half_up(value: float) -> int:
    """0.5 rounds towards +infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def status_for_score(score: int) -> str:
    if score >= ON_TRACK_THRESHOLD:
        return ProjectStatus.ON_TRACK
    if score >= AT_RISK_THRESHOLD:
        return ProjectStatus.AT_RISK
    return ProjectStatus.CRITICAL


def _latest(events: list, event_type: str):
    matching = [e for e in events if e.type == event_type]
    if not matching:
        return None
    return max(matching, key=lambda e: e.timestamp)


def _rating_score(rating: Optional[int]) -> float:
    # A missing (or zero) rating counts as the neutral baseline.
    if rating:
        return (rating / 5) * 100
    return NEUTRAL_BASELINE


def expected_progress(start: datetime, end: datetime, now: datetime) -> int:
    total_ms = (end - start) // _ONE_MS
    elapsed_ms = max(0, min(total_ms, (now - start) // _ONE_MS))
    if total_ms <= 0:
        return 0
    return round_half_up((elapsed_ms / total_ms) * 100)


def recompute(project, events: Iterable, *, now: Optional[datetime] = None) -> HealthResult:
    now = now or timezone.now()
    events = list(events)

    latest_checkin = _latest(events, EventType.CHECKIN)
    latest_feedback = _latest(events, EventType.FEEDBACK)

    open_risks = sum(
        1 for e in events if e.type == EventType.RISK and e.risk_status != RiskStatus.RESOLVED
    )
    flagged_issues = sum(1 for e in events if e.type == EventType.FEEDBACK and e.flag_issue)

    client_satisfaction = _rating_score(getattr(latest_feedback, "satisfaction_rating", None))
    employee_confidence = _rating_score(getattr(latest_checkin, "confidence_level", None))

    expected = expected_progress(project.start_date, project.end_date, now)
    schedule_lag = max(0, expected - (project.progress or 0))
    schedule_score = max(0, 100 - schedule_lag)

    risk_penalty = open_risks * OPEN_RISK_PENALTY + flagged_issues * FLAGGED_ISSUE_PENALTY

    base_score = (
        client_satisfaction * SATISFACTION_WEIGHT
        + employee_confidence * CONFIDENCE_WEIGHT
        + schedule_score * SCHEDULE_WEIGHT
    )
    final_score = max(0, min(100, round_half_up(base_score - risk_penalty)))

    return HealthResult(
        health_score=final_score,
        status=status_for_score(final_score),
        client_satisfaction=client_satisfaction,
        employee_confidence=employee_confidence,
        expected_progress=expected,
        schedule_score=schedule_score,
        open_risks=open_risks,
        flagged_issues=flagged_issues,
        risk_penalty=risk_penalty,
    )
