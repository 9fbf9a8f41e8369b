# pulse_core/ledger/serializers.py
"""
Input serializers, one per event type. Unknown keys are dropped, so each
payload only ever carries the fields valid for its type.
"""
from __future__ import annotations

from rest_framework import serializers

from pulse_core.ledger.constants import RiskSeverity
from pulse_core.ledger.validators import validate_attachment_link


class _BaseEventInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")


class CheckinInputSerializer(_BaseEventInputSerializer):
    progress_summary = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    blockers = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    confidence_level = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True, default=None)
    completion_percent = serializers.IntegerField(
        min_value=0, max_value=100, required=False, allow_null=True, default=None
    )
    attachment_link = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True,
        default=None,
        validators=[validate_attachment_link],
    )

    def validate_attachment_link(self, value):
        value = (value or "").strip()
        return value or None


class FeedbackInputSerializer(_BaseEventInputSerializer):
    satisfaction_rating = serializers.IntegerField(
        min_value=1, max_value=5, required=False, allow_null=True, default=None
    )
    clarity_rating = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True, default=None)
    flag_issue = serializers.BooleanField(required=False, default=False)
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class RiskInputSerializer(_BaseEventInputSerializer):
    title = serializers.CharField(max_length=255)
    severity = serializers.ChoiceField(choices=RiskSeverity.choices, required=False, default=RiskSeverity.MEDIUM)
    mitigation = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class StatusChangeInputSerializer(_BaseEventInputSerializer):
    title = serializers.CharField(max_length=255)


class RiskResolveInputSerializer(serializers.Serializer):
    mitigation = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def validate(self, attrs):
        # Blank text means "keep what is there"
        return {k: (v.strip() if isinstance(v, str) else v) or None for k, v in attrs.items()}
