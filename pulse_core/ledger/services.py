# pulse_core/ledger/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from pulse_core.accounts.context import Requester
from pulse_core.common.events import publish
from pulse_core.ledger import policy
from pulse_core.ledger.constants import EventType, RISK_RESOLVED_TITLE_PREFIX, RiskStatus
from pulse_core.ledger.emit import emit_event, emit_status_change
from pulse_core.ledger.models import ProjectEvent
from pulse_core.ledger.payloads import CheckinPayload, EventPayload, FeedbackPayload, parse_payload
from pulse_core.ledger.rate_limit import check_checkin_allowed
from pulse_core.ledger.selectors import LedgerSelectors
from pulse_core.projects.models import Project
from pulse_core.projects.services import ProjectService

logger = logging.getLogger(__name__)

FEEDBACK_FLAGGED = "ledger.feedback_flagged"


class LedgerService:
    """
    Writes to the project ledger.

    Ordering inside append() is fixed: project lookup, access policy, rate
    limit, ledger write, derived writes, health recompute. The first three can
    reject; nothing after the ledger write can fail the submission.
    """

    @staticmethod
    def _get_project(project_id) -> Project:
        project = Project.objects.prefetch_related("employees").filter(pk=project_id).first()
        if project is None:
            raise NotFound("Project not found")
        return project

    @staticmethod
    def submit_event(
        *,
        project_id,
        requester: Requester,
        event_type: str,
        fields: Mapping[str, Any],
        timestamp=None,
    ) -> ProjectEvent:
        payload = parse_payload(event_type, fields)
        return LedgerService.append(project_id=project_id, requester=requester, payload=payload, timestamp=timestamp)

    @staticmethod
    @transaction.atomic
    def append(
        *,
        project_id,
        requester: Requester,
        payload: EventPayload,
        timestamp=None,
    ) -> ProjectEvent:
        project = LedgerService._get_project(project_id)

        decision = policy.can_submit(payload.event_type, requester, project)
        if not decision:
            logger.warning(
                "Rejected %s on project %s by user %s: %s",
                payload.event_type,
                project.pk,
                requester.user_id,
                decision.message,
            )
            raise PermissionDenied(decision.message)

        ts = timestamp or timezone.now()

        if isinstance(payload, CheckinPayload):
            check_checkin_allowed(project_id=project.pk, user_id=requester.user_id, now=ts)

        event = emit_event(
            project_id=project.pk,
            user_id=requester.user_id,
            event_type=payload.event_type,
            title=payload.title,
            description=payload.description,
            timestamp=ts,
            fields=payload.ledger_fields(),
        )
        logger.info("Appended %s %s to project %s (user %s)", event.type, event.pk, project.pk, requester.user_id)

        if isinstance(payload, CheckinPayload) and payload.completion_percent is not None:
            Project.objects.filter(pk=project.pk).update(
                progress=payload.completion_percent,
                updated_at=timezone.now(),
            )

        if isinstance(payload, FeedbackPayload) and payload.flag_issue:
            try:
                with transaction.atomic():
                    publish(
                        FEEDBACK_FLAGGED,
                        {
                            "project_id": str(project.pk),
                            "event_id": str(event.pk),
                            "user_id": requester.user_id,
                        },
                    )
            except Exception:
                logger.exception("Could not open a risk for flagged feedback %s", event.pk)

        ProjectService.refresh_health_best_effort(project_id=project.pk)
        return event

    @staticmethod
    def list_events(*, project_id) -> QuerySet[ProjectEvent]:
        if not Project.objects.filter(pk=project_id).exists():
            raise NotFound("Project not found")
        return LedgerSelectors.events_for(project_id=project_id)

    @staticmethod
    @transaction.atomic
    def resolve_risk(
        *,
        project_id,
        event_id,
        requester: Requester,
        mitigation: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ProjectEvent:
        """
        OPEN -> RESOLVED. Resolving an already resolved risk succeeds without
        changing its status; every successful call writes its own audit line.
        """
        event = (
            ProjectEvent.objects.select_for_update()
            .filter(project_id=project_id, pk=event_id)
            .first()
        )
        if event is None:
            raise NotFound("Risk not found for this project")
        if event.type != EventType.RISK:
            raise ValidationError({"detail": "Only risk events can be resolved"})

        project = LedgerService._get_project(project_id)
        policy.ensure_can_resolve(requester, project)

        update_fields = ["risk_status"]
        event.risk_status = RiskStatus.RESOLVED
        if mitigation:
            event.mitigation = mitigation
            update_fields.append("mitigation")
        if description:
            event.description = description
            update_fields.append("description")
        event.save(update_fields=update_fields)

        emit_status_change(
            project_id=project.pk,
            user_id=requester.user_id,
            title=f"{RISK_RESOLVED_TITLE_PREFIX}{event.title}",
            description=event.mitigation or "",
        )
        logger.info("Risk %s on project %s resolved by user %s", event.pk, project.pk, requester.user_id)

        ProjectService.refresh_health_best_effort(project_id=project.pk)
        return event
