# pulse_core/ledger/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from pulse_core.accounts.selectors import display_name
from pulse_core.ledger.constants import EventType
from pulse_core.ledger.models import ProjectEvent


class ProjectEventSerializer(serializers.ModelSerializer):
    project_id = serializers.UUIDField(read_only=True)
    user_id = serializers.IntegerField(read_only=True, allow_null=True)
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = ProjectEvent
        fields = [
            "id",
            "project_id",
            "user_id",
            "user_name",
            "type",
            "title",
            "description",
            "timestamp",
            "progress_summary",
            "blockers",
            "confidence_level",
            "completion_percent",
            "attachment_link",
            "satisfaction_rating",
            "clarity_rating",
            "flag_issue",
            "comments",
            "severity",
            "mitigation",
            "risk_status",
            "created_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj) -> str | None:
        return display_name(obj.user) if obj.user_id else None


class EventSubmitSerializer(serializers.Serializer):
    """
    Schema-only: the body is the event type plus the fields of that type.
    Validation happens in pulse_core.ledger.payloads.
    """
    type = serializers.ChoiceField(choices=EventType.choices)
    title = serializers.CharField(required=False)
    description = serializers.CharField(required=False)
