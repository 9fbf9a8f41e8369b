# pulse_core/projects/models.py
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q

from pulse_core.common.models import UUIDModel


class ProjectStatus(models.TextChoices):
    ON_TRACK = "ON_TRACK", "On Track"
    AT_RISK = "AT_RISK", "At Risk"
    CRITICAL = "CRITICAL", "Critical"
    COMPLETED = "COMPLETED", "Completed"


class Project(UUIDModel):
    """
    A client engagement. health_score/status are a derived snapshot of the
    project's event ledger, rewritten after every ledger mutation.
    """
    name = models.CharField(max_length=255)
    description = models.TextField()

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="client_projects",
    )
    employees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="assigned_projects",
        blank=True,
    )

    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    # null = unknown; repaired from the latest check-in on first read
    progress = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    health_score = models.PositiveSmallIntegerField(
        default=100,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    status = models.CharField(
        max_length=32,
        choices=ProjectStatus.choices,
        default=ProjectStatus.ON_TRACK,
        db_index=True,
    )

    class Meta:
        db_table = "projects_project"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["client", "status"], name="projects_pr_client__4c3a9e_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_date__lte=F("end_date")),
                name="ck_project_window_ordered",
            ),
            models.CheckConstraint(
                condition=Q(progress__isnull=True) | Q(progress__lte=100),
                name="ck_project_progress_range",
            ),
            models.CheckConstraint(
                condition=Q(health_score__lte=100),
                name="ck_project_health_range",
            ),
        ]

    def __str__(self) -> str:
        return f"Project({self.name}, {self.status})"

    def employee_ids(self) -> set[int]:
        # Uses the prefetch cache when the caller prefetched "employees".
        return {u.pk for u in self.employees.all()}
