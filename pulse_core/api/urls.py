# pulse_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from pulse_core.accounts.api.auth import LoginView, LogoutView, RefreshView
from pulse_core.accounts.api.me import MeView
from pulse_core.accounts.api.views import UserViewSet
from pulse_core.common.api.health import HealthView
from pulse_core.ledger.api.views import ProjectEventViewSet
from pulse_core.projects.api.views import ProjectViewSet

router = DefaultRouter()
router.register(r"projects", ProjectViewSet, basename="projects")
router.register(r"users", UserViewSet, basename="users")

project_events = ProjectEventViewSet.as_view({"get": "list", "post": "create"})
project_event_resolve = ProjectEventViewSet.as_view({"patch": "resolve"})

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("health/", HealthView.as_view(), name="health"),

    # Ledger (nested under a project)
    path("projects/<uuid:project_id>/events/", project_events, name="project-events"),
    path(
        "projects/<uuid:project_id>/events/<uuid:pk>/resolve/",
        project_event_resolve,
        name="project-event-resolve",
    ),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
