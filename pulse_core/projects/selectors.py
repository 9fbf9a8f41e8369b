# pulse_core/projects/selectors.py
from __future__ import annotations

from django.db.models import Avg, Count, Q, QuerySet

from pulse_core.accounts.context import Requester
from pulse_core.projects.health import round_half_up
from pulse_core.projects.models import Project, ProjectStatus


class ProjectSelectors:
    """
    Read-only queries for projects.
    No .save(), no state mutation here.
    """

    @staticmethod
    def base_queryset() -> QuerySet[Project]:
        # Explicit joins for client / team, the serializers read both.
        return Project.objects.select_related("client").prefetch_related("employees")

    @staticmethod
    def get_project(*, project_id) -> Project | None:
        return ProjectSelectors.base_queryset().filter(pk=project_id).first()

    @staticmethod
    def list_for(requester: Requester) -> QuerySet[Project]:
        """
        ADMIN: every project.
        Anyone else: projects they are assigned to or own as client, matching
        policy.can_view, so a user holding both EMPLOYEE and CLIENT sees both.
        """
        qs = ProjectSelectors.base_queryset()

        if requester.is_admin:
            return qs.order_by("-created_at")
        visible = Q(employees__id=requester.user_id) | Q(client_id=requester.user_id)
        return qs.filter(visible).distinct().order_by("-created_at")

    @staticmethod
    def portfolio_summary(requester: Requester) -> dict:
        ids = ProjectSelectors.list_for(requester).values("pk")
        agg = Project.objects.filter(pk__in=ids).aggregate(
            total=Count("pk"),
            on_track=Count("pk", filter=Q(status=ProjectStatus.ON_TRACK)),
            at_risk=Count("pk", filter=Q(status=ProjectStatus.AT_RISK)),
            critical=Count("pk", filter=Q(status=ProjectStatus.CRITICAL)),
            completed=Count("pk", filter=Q(status=ProjectStatus.COMPLETED)),
            average_health=Avg("health_score"),
        )
        avg = agg.pop("average_health")
        agg["average_health"] = round_half_up(avg) if avg is not None else 0
        return agg
