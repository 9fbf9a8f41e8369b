import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import pulse_core.ledger.validators


def _rating():
    return [
        django.core.validators.MinValueValidator(1),
        django.core.validators.MaxValueValidator(5),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("projects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ProjectEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("CHECKIN", "Check-in"),
                            ("FEEDBACK", "Feedback"),
                            ("RISK", "Risk"),
                            ("STATUS_CHANGE", "Status change"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("timestamp", models.DateTimeField(db_index=True)),
                ("progress_summary", models.TextField(blank=True, null=True)),
                ("blockers", models.TextField(blank=True, null=True)),
                ("confidence_level", models.PositiveSmallIntegerField(blank=True, null=True, validators=_rating())),
                (
                    "completion_percent",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "attachment_link",
                    models.CharField(
                        blank=True,
                        max_length=500,
                        null=True,
                        validators=[pulse_core.ledger.validators.validate_attachment_link],
                    ),
                ),
                ("satisfaction_rating", models.PositiveSmallIntegerField(blank=True, null=True, validators=_rating())),
                ("clarity_rating", models.PositiveSmallIntegerField(blank=True, null=True, validators=_rating())),
                ("flag_issue", models.BooleanField(blank=True, null=True)),
                ("comments", models.TextField(blank=True, null=True)),
                (
                    "severity",
                    models.CharField(
                        blank=True,
                        choices=[("LOW", "Low"), ("MEDIUM", "Medium"), ("HIGH", "High")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("mitigation", models.TextField(blank=True, null=True)),
                (
                    "risk_status",
                    models.CharField(
                        blank=True,
                        choices=[("OPEN", "Open"), ("RESOLVED", "Resolved")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="projects.project",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="project_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "ledger_event",
                "ordering": ["-timestamp", "-created_at"],
                "indexes": [
                    models.Index(fields=["project", "timestamp"], name="ledger_even_project_7b2f41_idx"),
                    models.Index(
                        fields=["project", "user", "type", "timestamp"],
                        name="ledger_even_project_e91c0d_idx",
                    ),
                ],
            },
        ),
    ]
