# pulse_core/ledger/rate_limit.py
"""
One check-in per employee per project per rolling 7-day window.

The window is 7 x 24h anchored at the submission time, not a calendar week:
a check-in 6d23h after the previous one is rejected, 7d1h after is allowed.

Known race: the read here and the append in LedgerService are not serialized,
so two concurrent check-ins from the same user can both pass. Closing it
would take a unique index on (project, user, type, week bucket).
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from pulse_core.common.api.exceptions import ConflictError
from pulse_core.ledger.constants import CHECKIN_WINDOW_DAYS, EventType
from pulse_core.ledger.models import ProjectEvent

logger = logging.getLogger(__name__)

WEEKLY_CHECKIN_MSG = "Weekly check-in already submitted for this project."

CHECKIN_WINDOW = timedelta(days=CHECKIN_WINDOW_DAYS)


def window_start(now: datetime) -> datetime:
    return now - CHECKIN_WINDOW


def has_recent_checkin(*, project_id, user_id: int, now: datetime) -> bool:
    return ProjectEvent.objects.filter(
        project_id=project_id,
        user_id=user_id,
        type=EventType.CHECKIN,
        timestamp__gte=window_start(now),
    ).exists()


def check_checkin_allowed(*, project_id, user_id: int, now: datetime) -> None:
    if has_recent_checkin(project_id=project_id, user_id=user_id, now=now):
        logger.warning("Check-in rejected: user %s already checked in on project %s this week", user_id, project_id)
        raise ConflictError(WEEKLY_CHECKIN_MSG)
