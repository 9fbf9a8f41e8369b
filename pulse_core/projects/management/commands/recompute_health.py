# pulse_core/projects/management/commands/recompute_health.py
from __future__ import annotations

import uuid

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.timezone import now

from pulse_core.ledger.models import ProjectEvent
from pulse_core.projects.health import recompute
from pulse_core.projects.models import Project, ProjectStatus
from pulse_core.projects.services import ProjectService


class Command(BaseCommand):
    help = "Recompute the health snapshot (score + status) of projects from their ledgers."

    def add_arguments(self, parser):
        parser.add_argument("--project-id", type=str, default=None, help="Only this project UUID.")
        parser.add_argument("--dry-run", action="store_true", help="Print new scores only; do not write.")

    def handle(self, *args, **opts):
        dry = opts["dry_run"]
        ts = now()

        qs = Project.objects.all().order_by("created_at")
        if opts["project_id"]:
            try:
                project_id = uuid.UUID(opts["project_id"])
            except ValueError:
                raise CommandError(f"Invalid project id: {opts['project_id']!r} is not a UUID.")
            qs = qs.filter(pk=project_id)
            if not qs.exists():
                raise CommandError(f"Project {opts['project_id']} not found.")

        examined = 0
        changed = 0

        for project in qs:
            examined += 1
            before = (project.health_score, project.status)

            if dry:
                result = recompute(project, ProjectEvent.objects.filter(project_id=project.pk), now=ts)
            else:
                with transaction.atomic():
                    result = ProjectService.refresh_health(project=project, now=ts)

            status_after = project.status if not dry or project.status == ProjectStatus.COMPLETED else result.status
            if before != (result.health_score, status_after):
                changed += 1
            self.stdout.write(
                f"{project.pk} {project.name}: {before[0]} -> {result.health_score} ({status_after}; schedule {result.schedule_score}, risk penalty {result.risk_penalty})"
            )

        self.stdout.write(f"Projects examined: {examined}")
        if dry:
            self.stdout.write(f"DRY RUN: snapshots that would change: {changed}")
        else:
            self.stdout.write(self.style.SUCCESS(f"Snapshots changed: {changed}"))
