# pulse_core/ledger/models.py
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from pulse_core.ledger.constants import EventType, RiskSeverity, RiskStatus
from pulse_core.ledger.validators import validate_attachment_link

# The only columns a RISK event may change after creation (resolution).
RISK_MUTABLE_FIELDS = frozenset({"risk_status", "mitigation", "description"})


class ProjectEvent(models.Model):
    """
    Append-only ledger entry scoped to a project.

    Entries are never updated, except a RISK entry being resolved, and never
    deleted one by one: they go away only with their project (cascade).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    project = models.ForeignKey("projects.Project", on_delete=models.CASCADE, related_name="events")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="project_events",
        null=True,
        blank=True,
    )

    type = models.CharField(max_length=20, choices=EventType.choices, db_index=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    # Wall clock at submission; not guaranteed monotonic
    timestamp = models.DateTimeField(db_index=True)

    # CHECKIN
    progress_summary = models.TextField(null=True, blank=True)
    blockers = models.TextField(null=True, blank=True)
    confidence_level = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    completion_percent = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    # Absolute http(s) URL or server-relative file path
    attachment_link = models.CharField(max_length=500, null=True, blank=True, validators=[validate_attachment_link])

    # FEEDBACK
    satisfaction_rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    clarity_rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    flag_issue = models.BooleanField(null=True, blank=True)
    comments = models.TextField(null=True, blank=True)

    # RISK
    severity = models.CharField(max_length=10, choices=RiskSeverity.choices, null=True, blank=True)
    mitigation = models.TextField(null=True, blank=True)
    risk_status = models.CharField(max_length=10, choices=RiskStatus.choices, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "ledger_event"
        ordering = ["-timestamp", "-created_at"]
        indexes = [
            models.Index(fields=["project", "timestamp"], name="ledger_even_project_7b2f41_idx"),
            # rate limiter lookup
            models.Index(fields=["project", "user", "type", "timestamp"], name="ledger_even_project_e91c0d_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.title!r} @ {self.timestamp}"

    def save(self, *args, **kwargs):
        # UUID PK exists even before first save, so use _state.adding
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if self.type != EventType.RISK or not update_fields or not set(update_fields) <= RISK_MUTABLE_FIELDS:
                raise ValidationError(
                    "ProjectEvent is immutable; only a risk's status, mitigation and description may change."
                )
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ProjectEvent cannot be deleted individually; delete the project instead.")
