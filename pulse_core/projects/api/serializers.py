# pulse_core/projects/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from pulse_core.accounts.selectors import display_name
from pulse_core.projects.models import Project, ProjectStatus


class ProjectSerializer(serializers.ModelSerializer):
    client_id = serializers.IntegerField(read_only=True)
    client_name = serializers.SerializerMethodField()
    employee_ids = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            "id",
            "name",
            "description",
            "client_id",
            "client_name",
            "employee_ids",
            "start_date",
            "end_date",
            "progress",
            "health_score",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_client_name(self, obj) -> str:
        return display_name(obj.client)

    def get_employee_ids(self, obj) -> list[int]:
        return sorted(obj.employee_ids())


class ProjectCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    client_id = serializers.IntegerField()
    employee_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    progress = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"end_date": "End date must be on or after the start date."})
        return attrs


class ProjectUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    client_id = serializers.IntegerField(required=False)
    employee_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
    progress = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=ProjectStatus.choices, required=False)


class PortfolioSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    on_track = serializers.IntegerField()
    at_risk = serializers.IntegerField()
    critical = serializers.IntegerField()
    completed = serializers.IntegerField()
    average_health = serializers.IntegerField()
