# pulse_core/projects/admin.py
from __future__ import annotations

from django.contrib import admin

from pulse_core.projects.models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "client",
        "status",
        "health_score",
        "progress",
        "start_date",
        "end_date",
        "created_at",
    )
    list_filter = ("status",)
    search_fields = ("id", "name", "client__username")
    ordering = ("-created_at",)

    # derived from the ledger
    readonly_fields = ("health_score", "created_at", "updated_at")

    list_select_related = ("client",)
    filter_horizontal = ("employees",)

    fieldsets = (
        ("Project", {"fields": ("name", "description", "status")}),
        ("People", {"fields": ("client", "employees")}),
        ("Schedule", {"fields": ("start_date", "end_date", "progress")}),
        ("Health", {"fields": ("health_score",)}),
        ("Audit", {"fields": ("created_at", "updated_at")}),
    )
