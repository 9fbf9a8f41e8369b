# pulse_core/projects/services.py
from __future__ import annotations

import logging
from typing import Any, Iterable

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from pulse_core.accounts.context import Requester
from pulse_core.common.permissions import ROLE_CLIENT, ROLE_EMPLOYEE, user_roles
from pulse_core.ledger.constants import (
    EventType,
    PROJECT_INITIALIZED_DESCRIPTION,
    PROJECT_INITIALIZED_TITLE,
)
from pulse_core.ledger.emit import emit_status_change
from pulse_core.ledger.models import ProjectEvent
from pulse_core.projects.health import HealthResult, recompute
from pulse_core.projects.models import Project, ProjectStatus
from pulse_core.projects.selectors import ProjectSelectors

logger = logging.getLogger(__name__)

# Admin-editable project fields; health_score is derived and never patched directly.
UPDATABLE_FIELDS = frozenset(
    {"name", "description", "client_id", "employee_ids", "start_date", "end_date", "progress", "status"}
)


class ProjectService:
    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _require_admin(requester: Requester, action: str) -> None:
        if not requester.is_admin:
            raise PermissionDenied(f"Only admins can {action} projects.")

    @staticmethod
    def _validate_window(start_date, end_date) -> None:
        if start_date and end_date and start_date > end_date:
            raise ValidationError({"end_date": "End date must be on or after the start date."})

    @staticmethod
    def _resolve_client(client_id):
        User = get_user_model()
        client = User.objects.filter(pk=client_id).first()
        if client is None:
            raise ValidationError({"client_id": "Client not found."})
        if ROLE_CLIENT not in user_roles(client):
            raise ValidationError({"client_id": "Assigned client must have the CLIENT role."})
        return client

    @staticmethod
    def _resolve_employees(employee_ids: Iterable[int]) -> list:
        ids = {int(i) for i in employee_ids or []}
        if not ids:
            return []
        User = get_user_model()
        users = list(User.objects.filter(pk__in=ids).prefetch_related("groups"))
        missing = ids - {u.pk for u in users}
        if missing:
            raise ValidationError({"employee_ids": f"Unknown users: {sorted(missing)}."})
        not_employees = sorted(u.pk for u in users if ROLE_EMPLOYEE not in user_roles(u))
        if not_employees:
            raise ValidationError({"employee_ids": f"Users without the EMPLOYEE role: {not_employees}."})
        return users

    # ---------------------------------------------------------------------
    # Health snapshot
    # ---------------------------------------------------------------------
    @staticmethod
    def refresh_health(*, project: Project, now=None) -> HealthResult:
        """
        Recompute from the full ledger and persist health_score/status.
        COMPLETED is terminal and admin-set: the score still refreshes,
        the status stays.
        """
        events = ProjectEvent.objects.filter(project_id=project.pk)
        result = recompute(project, events, now=now)
        logger.debug("Health for project %s: %s", project.pk, result)

        project.health_score = result.health_score
        if project.status != ProjectStatus.COMPLETED:
            project.status = result.status
        project.save(update_fields=["health_score", "status", "updated_at"])
        return result

    @staticmethod
    def refresh_health_best_effort(*, project_id, now=None) -> HealthResult | None:
        """
        Used after a committed-in-spirit ledger write: the ledger is the source
        of truth, the snapshot is a cache that heals on the next mutation.
        """
        try:
            with transaction.atomic():
                project = Project.objects.get(pk=project_id)
                return ProjectService.refresh_health(project=project, now=now)
        except Exception:
            logger.exception("Health recompute failed for project %s", project_id)
            return None

    # ---------------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------------
    @staticmethod
    def get_project(*, project_id) -> Project:
        """
        Fetch a project; a project whose progress was never recorded adopts
        the completion percent of its newest check-in (one-time repair).
        """
        project = ProjectSelectors.get_project(project_id=project_id)
        if project is None:
            raise NotFound("Project not found")

        if project.progress is None:
            latest = (
                ProjectEvent.objects.filter(
                    project_id=project.pk,
                    type=EventType.CHECKIN,
                    completion_percent__isnull=False,
                )
                .order_by("-timestamp", "-created_at")
                .first()
            )
            if latest is not None:
                project.progress = latest.completion_percent
                project.save(update_fields=["progress", "updated_at"])
                logger.info("Backfilled progress=%s for project %s", project.progress, project.pk)

        return project

    # ---------------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def create_project(
        *,
        requester: Requester,
        name: str,
        description: str,
        client_id: int,
        start_date,
        end_date,
        employee_ids: Iterable[int] = (),
        progress: int | None = None,
    ) -> Project:
        ProjectService._require_admin(requester, "create")
        ProjectService._validate_window(start_date, end_date)

        client = ProjectService._resolve_client(client_id)
        employees = ProjectService._resolve_employees(employee_ids)

        project = Project.objects.create(
            name=name,
            description=description,
            client=client,
            start_date=start_date,
            end_date=end_date,
            progress=progress,
        )
        project.employees.set(employees)

        try:
            with transaction.atomic():
                emit_status_change(
                    project_id=project.pk,
                    user_id=requester.user_id,
                    title=PROJECT_INITIALIZED_TITLE,
                    description=PROJECT_INITIALIZED_DESCRIPTION,
                )
        except Exception:
            logger.exception("Could not record initialization entry for project %s", project.pk)

        ProjectService.refresh_health_best_effort(project_id=project.pk)
        logger.info("Project %s created by user %s", project.pk, requester.user_id)

        return ProjectSelectors.get_project(project_id=project.pk)

    @staticmethod
    @transaction.atomic
    def update_project(*, requester: Requester, project_id, patch: dict[str, Any]) -> Project:
        ProjectService._require_admin(requester, "update")

        project = ProjectSelectors.get_project(project_id=project_id)
        if project is None:
            raise NotFound("Project not found")

        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError({"detail": f"Fields cannot be updated: {sorted(unknown)}."})

        start_date = patch.get("start_date", project.start_date)
        end_date = patch.get("end_date", project.end_date)
        ProjectService._validate_window(start_date, end_date)

        changed: list[str] = []
        for field in ("name", "description", "start_date", "end_date", "progress"):
            if field in patch:
                setattr(project, field, patch[field])
                changed.append(field)

        if "client_id" in patch:
            project.client = ProjectService._resolve_client(patch["client_id"])
            changed.append("client")

        if "status" in patch:
            if patch["status"] not in ProjectStatus.values:
                raise ValidationError({"status": f"Unknown status '{patch['status']}'."})
            project.status = patch["status"]
            changed.append("status")

        if changed:
            project.save(update_fields=[*changed, "updated_at"])

        if "employee_ids" in patch:
            project.employees.set(ProjectService._resolve_employees(patch["employee_ids"]))

        ProjectService.refresh_health_best_effort(project_id=project.pk)
        logger.info("Project %s updated by user %s (%s)", project.pk, requester.user_id, ", ".join(sorted(patch)))

        return ProjectSelectors.get_project(project_id=project.pk)

    @staticmethod
    @transaction.atomic
    def delete_project(*, requester: Requester, project_id) -> None:
        """
        Deletes the project and, through the FK cascade, its whole ledger in
        the same transaction.
        """
        ProjectService._require_admin(requester, "delete")

        project = Project.objects.filter(pk=project_id).first()
        if project is None:
            raise NotFound("Project not found")

        _, deleted = project.delete()
        logger.info(
            "Project %s deleted by user %s (%s events removed)",
            project_id,
            requester.user_id,
            deleted.get(ProjectEvent._meta.label, 0),
        )
