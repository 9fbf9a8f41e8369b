# pulse_core/ledger/selectors.py
from __future__ import annotations

import django_filters
from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from pulse_core.ledger.constants import EventType, RiskStatus
from pulse_core.ledger.models import ProjectEvent


class ProjectEventFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=EventType.choices)
    risk_status = django_filters.ChoiceFilter(choices=RiskStatus.choices)
    since = django_filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="gte")
    until = django_filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="lte")

    class Meta:
        model = ProjectEvent
        fields = ["type", "risk_status"]


class LedgerSelectors:
    """
    Read-only queries over the project ledger.
    """

    @staticmethod
    def events_for(*, project_id) -> QuerySet[ProjectEvent]:
        # newest first; ties broken by insertion time
        return (
            ProjectEvent.objects.filter(project_id=project_id)
            .select_related("user")
            .order_by("-timestamp", "-created_at")
        )

    @staticmethod
    def filter_events(qs: QuerySet[ProjectEvent], params) -> QuerySet[ProjectEvent]:
        fs = ProjectEventFilter(params, queryset=qs)
        if not fs.is_valid():
            raise ValidationError(fs.errors)
        return fs.qs
