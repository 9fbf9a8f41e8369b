# pulse_core/projects/api/views.py
from __future__ import annotations

import django_filters
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from pulse_core.accounts.context import requester_from_user
from pulse_core.common.api.pagination import paginate
from pulse_core.common.permissions import ProjectPermission
from pulse_core.ledger.policy import ensure_can_view
from pulse_core.projects.api.serializers import (
    PortfolioSummarySerializer,
    ProjectCreateSerializer,
    ProjectSerializer,
    ProjectUpdateSerializer,
)
from pulse_core.projects.models import Project, ProjectStatus
from pulse_core.projects.selectors import ProjectSelectors
from pulse_core.projects.services import ProjectService


class ProjectFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ProjectStatus.choices)
    name = django_filters.CharFilter(lookup_expr="icontains")

    class Meta:
        model = Project
        fields = ["status", "name"]


class ProjectViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - builds the Requester
    - selectors for reads, services for writes
    - visibility: admins see all, employees their assignments, clients their own
    """

    permission_classes = [ProjectPermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"
    serializer_class = ProjectSerializer

    # ----------------------------
    # Reads
    # ----------------------------
    @extend_schema(tags=["Projects"], responses={200: ProjectSerializer(many=True)})
    def list(self, request):
        requester = requester_from_user(request.user)
        fs = ProjectFilter(request.query_params, queryset=ProjectSelectors.list_for(requester))
        if not fs.is_valid():
            raise ValidationError(fs.errors)
        return paginate(request, fs.qs, ProjectSerializer)

    @extend_schema(tags=["Projects"], responses={200: ProjectSerializer})
    def retrieve(self, request, pk=None):
        requester = requester_from_user(request.user)
        project = ProjectService.get_project(project_id=pk)
        ensure_can_view(requester, project)
        return Response(ProjectSerializer(project).data)

    @extend_schema(tags=["Projects"], responses={200: PortfolioSummarySerializer})
    @action(detail=False, methods=["get"])
    def summary(self, request):
        data = ProjectSelectors.portfolio_summary(requester_from_user(request.user))
        return Response(PortfolioSummarySerializer(data).data)

    # ----------------------------
    # Writes (admin)
    # ----------------------------
    @extend_schema(tags=["Projects"], request=ProjectCreateSerializer, responses={201: ProjectSerializer})
    def create(self, request):
        ser = ProjectCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        project = ProjectService.create_project(requester=requester_from_user(request.user), **ser.validated_data)
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Projects"], request=ProjectUpdateSerializer, responses={200: ProjectSerializer})
    def partial_update(self, request, pk=None):
        ser = ProjectUpdateSerializer(data=request.data or {}, partial=True)
        ser.is_valid(raise_exception=True)

        project = ProjectService.update_project(
            requester=requester_from_user(request.user),
            project_id=pk,
            patch=dict(ser.validated_data),
        )
        return Response(ProjectSerializer(project).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Projects"], responses={204: None})
    def destroy(self, request, pk=None):
        ProjectService.delete_project(requester=requester_from_user(request.user), project_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
