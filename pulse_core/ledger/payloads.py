# pulse_core/ledger/payloads.py
"""
Typed submission payloads.

parse_payload() is the single validation boundary for event submissions:
raw fields go in, one of the four frozen payload classes comes out.
Everything past this point (policy, rate limit, ledger append) works with
the typed payload only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

from rest_framework.exceptions import ValidationError

from pulse_core.ledger.constants import EventType, RiskSeverity, RiskStatus
from pulse_core.ledger.serializers import (
    CheckinInputSerializer,
    FeedbackInputSerializer,
    RiskInputSerializer,
    StatusChangeInputSerializer,
)

DEFAULT_CHECKIN_TITLE = "Weekly Progress Update"
DEFAULT_FEEDBACK_TITLE = "Stakeholder Feedback"


@dataclass(frozen=True)
class CheckinPayload:
    event_type: ClassVar[str] = EventType.CHECKIN

    title: str
    description: str
    progress_summary: Optional[str] = None
    blockers: Optional[str] = None
    confidence_level: Optional[int] = None
    completion_percent: Optional[int] = None
    attachment_link: Optional[str] = None

    def ledger_fields(self) -> Dict[str, Any]:
        return {
            "progress_summary": self.progress_summary,
            "blockers": self.blockers,
            "confidence_level": self.confidence_level,
            "completion_percent": self.completion_percent,
            "attachment_link": self.attachment_link,
        }


@dataclass(frozen=True)
class FeedbackPayload:
    event_type: ClassVar[str] = EventType.FEEDBACK

    title: str
    description: str
    satisfaction_rating: Optional[int] = None
    clarity_rating: Optional[int] = None
    flag_issue: bool = False
    comments: Optional[str] = None

    def ledger_fields(self) -> Dict[str, Any]:
        return {
            "satisfaction_rating": self.satisfaction_rating,
            "clarity_rating": self.clarity_rating,
            "flag_issue": self.flag_issue,
            "comments": self.comments,
        }


@dataclass(frozen=True)
class RiskPayload:
    event_type: ClassVar[str] = EventType.RISK

    title: str
    description: str
    severity: str = RiskSeverity.MEDIUM
    mitigation: Optional[str] = None

    def ledger_fields(self) -> Dict[str, Any]:
        # New risks always start OPEN; RESOLVED is reachable only through resolution.
        return {
            "severity": self.severity,
            "mitigation": self.mitigation,
            "risk_status": RiskStatus.OPEN,
        }


@dataclass(frozen=True)
class StatusChangePayload:
    event_type: ClassVar[str] = EventType.STATUS_CHANGE

    title: str
    description: str

    def ledger_fields(self) -> Dict[str, Any]:
        return {}


EventPayload = Union[CheckinPayload, FeedbackPayload, RiskPayload, StatusChangePayload]


def _validated(serializer_class, fields: Mapping[str, Any]) -> Dict[str, Any]:
    ser = serializer_class(data=fields if fields is not None else {})
    ser.is_valid(raise_exception=True)
    return dict(ser.validated_data)


def _checkin(fields) -> CheckinPayload:
    data = _validated(CheckinInputSerializer, fields)
    return CheckinPayload(
        title=data["title"] or DEFAULT_CHECKIN_TITLE,
        description=data["description"] or data["progress_summary"] or "",
        progress_summary=data["progress_summary"],
        blockers=data["blockers"],
        confidence_level=data["confidence_level"],
        completion_percent=data["completion_percent"],
        attachment_link=data["attachment_link"],
    )


def _feedback(fields) -> FeedbackPayload:
    data = _validated(FeedbackInputSerializer, fields)
    description = data["description"]
    if not description:
        rating = data["satisfaction_rating"]
        description = f"Satisfaction: {rating if rating is not None else '-'}/5. Comments: {data['comments'] or ''}"
    return FeedbackPayload(
        title=data["title"] or DEFAULT_FEEDBACK_TITLE,
        description=description.strip(),
        satisfaction_rating=data["satisfaction_rating"],
        clarity_rating=data["clarity_rating"],
        flag_issue=bool(data["flag_issue"]),
        comments=data["comments"],
    )


def _risk(fields) -> RiskPayload:
    data = _validated(RiskInputSerializer, fields)
    description = data["description"] or f"Severity: {data['severity']}. Mitigation: {data['mitigation'] or ''}".strip()
    return RiskPayload(
        title=data["title"],
        description=description,
        severity=data["severity"],
        mitigation=data["mitigation"],
    )


def _status_change(fields) -> StatusChangePayload:
    data = _validated(StatusChangeInputSerializer, fields)
    return StatusChangePayload(title=data["title"], description=data["description"])


_PARSERS = {
    EventType.CHECKIN.value: _checkin,
    EventType.FEEDBACK.value: _feedback,
    EventType.RISK.value: _risk,
    EventType.STATUS_CHANGE.value: _status_change,
}


def parse_payload(event_type: str, fields: Mapping[str, Any]) -> EventPayload:
    parser = _PARSERS.get(str(event_type or "").upper())
    if parser is None:
        raise ValidationError(
            {"type": f"Unknown event type '{event_type}'. Expected one of: {', '.join(EventType.values)}."}
        )
    return parser(fields)
