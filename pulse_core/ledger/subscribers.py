# pulse_core/ledger/subscribers.py
from uuid import UUID

from pulse_core.common.events import subscribe
from pulse_core.ledger.constants import (
    EventType,
    FLAGGED_RISK_DEFAULT_DESCRIPTION,
    FLAGGED_RISK_DEFAULT_TITLE,
    FLAGGED_RISK_MITIGATION,
    FLAGGED_RISK_SEVERITY,
    RiskStatus,
)
from pulse_core.ledger.emit import emit_event
from pulse_core.ledger.models import ProjectEvent
from pulse_core.ledger.payloads import DEFAULT_FEEDBACK_TITLE


@subscribe("ledger.feedback_flagged")
def on_feedback_flagged(payload: dict) -> None:
    feedback = ProjectEvent.objects.get(
        pk=UUID(payload["event_id"]),
        project_id=UUID(payload["project_id"]),
        type=EventType.FEEDBACK,
    )

    # A client-supplied title carries over; the generic feedback title does not
    title = feedback.title if feedback.title and feedback.title != DEFAULT_FEEDBACK_TITLE else FLAGGED_RISK_DEFAULT_TITLE

    emit_event(
        project_id=feedback.project_id,
        user_id=payload.get("user_id"),
        event_type=EventType.RISK,
        title=title,
        description=feedback.comments or FLAGGED_RISK_DEFAULT_DESCRIPTION,
        timestamp=feedback.timestamp,
        fields={
            "severity": FLAGGED_RISK_SEVERITY,
            "mitigation": FLAGGED_RISK_MITIGATION,
            "risk_status": RiskStatus.OPEN,
        },
    )
