# pulse_core/ledger/emit.py
from __future__ import annotations

from typing import Any, Dict, Optional

from django.utils.timezone import now

from pulse_core.ledger.constants import EventType
from pulse_core.ledger.models import ProjectEvent


def emit_event(
    *,
    project_id,
    user_id: int | None,
    event_type: str,
    title: str,
    description: str = "",
    timestamp=None,
    fields: Optional[Dict[str, Any]] = None,
) -> ProjectEvent:
    """
    Raw ledger write. No policy checks: callers (LedgerService, ProjectService)
    decide whether the write is allowed before getting here.

    Writes inside the caller's transaction, so a rolled-back operation leaves
    no ghost history behind.
    """
    return ProjectEvent.objects.create(
        project_id=project_id,
        user_id=user_id,
        type=event_type,
        title=title,
        description=description or "",
        timestamp=timestamp or now(),
        **(fields or {}),
    )


def emit_status_change(*, project_id, user_id: int | None, title: str, description: str = "", timestamp=None) -> ProjectEvent:
    """System-authored audit line (project initialized, risk resolved, ...)."""
    return emit_event(
        project_id=project_id,
        user_id=user_id,
        event_type=EventType.STATUS_CHANGE,
        title=title,
        description=description,
        timestamp=timestamp,
    )
