# pulse_core/ledger/admin.py
from __future__ import annotations

from django.contrib import admin

from pulse_core.ledger.models import ProjectEvent


@admin.register(ProjectEvent)
class ProjectEventAdmin(admin.ModelAdmin):
    """Read-only view of the ledger; writes go through LedgerService."""

    list_display = ("id", "project", "type", "title", "user", "risk_status", "timestamp")
    list_filter = ("type", "risk_status", "severity")
    search_fields = ("id", "title", "project__name")
    ordering = ("-timestamp",)
    list_select_related = ("project", "user")

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
