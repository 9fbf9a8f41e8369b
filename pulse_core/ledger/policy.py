# pulse_core/ledger/policy.py
"""
Who may write what to a project's ledger.

Pure predicates over (event type, requester, project). Every event type has an
explicit rule; an unknown type is denied, never allowed by default.
The ensure_* variants raise PermissionDenied carrying the rule's message.
"""
from __future__ import annotations

from dataclasses import dataclass

from rest_framework.exceptions import NotFound, PermissionDenied

from pulse_core.accounts.context import Requester
from pulse_core.ledger.constants import EventType

MSG_FEEDBACK_CLIENT_ONLY = "Only the assigned client can submit feedback."
MSG_EMPLOYEES_ONLY = "Only assigned employees can submit check-ins or risks."
MSG_STATUS_CHANGE_ADMIN_ONLY = "Only admins can post status changes."
MSG_UNKNOWN_EVENT_TYPE = "Unknown event type."
MSG_RESOLVE_DENIED = "Only assigned employees or admins can resolve risks."


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = PolicyDecision(True)


def _is_assigned_employee(requester: Requester, project) -> bool:
    return requester.user_id in project.employee_ids()


def _is_owning_client(requester: Requester, project) -> bool:
    return requester.user_id == project.client_id


def can_submit(event_type: str, requester: Requester, project) -> PolicyDecision:
    if event_type == EventType.FEEDBACK:
        return ALLOW if _is_owning_client(requester, project) else PolicyDecision(False, MSG_FEEDBACK_CLIENT_ONLY)

    if event_type in (EventType.CHECKIN, EventType.RISK):
        return ALLOW if _is_assigned_employee(requester, project) else PolicyDecision(False, MSG_EMPLOYEES_ONLY)

    if event_type == EventType.STATUS_CHANGE:
        return ALLOW if requester.is_admin else PolicyDecision(False, MSG_STATUS_CHANGE_ADMIN_ONLY)

    return PolicyDecision(False, MSG_UNKNOWN_EVENT_TYPE)


def ensure_can_submit(event_type: str, requester: Requester, project) -> None:
    decision = can_submit(event_type, requester, project)
    if not decision:
        raise PermissionDenied(decision.message)


def can_resolve(requester: Requester, project) -> PolicyDecision:
    if requester.is_admin or _is_assigned_employee(requester, project):
        return ALLOW
    return PolicyDecision(False, MSG_RESOLVE_DENIED)


def ensure_can_resolve(requester: Requester, project) -> None:
    decision = can_resolve(requester, project)
    if not decision:
        raise PermissionDenied(decision.message)


def can_view(requester: Requester, project) -> bool:
    return (
        requester.is_admin
        or _is_owning_client(requester, project)
        or _is_assigned_employee(requester, project)
    )


def ensure_can_view(requester: Requester, project) -> None:
    # 404 rather than 403 so project ids of other clients are not disclosed
    if not can_view(requester, project):
        raise NotFound("Project not found")
