# pulse_core/ledger/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from pulse_core.accounts.context import requester_from_user
from pulse_core.common.api.pagination import paginate
from pulse_core.common.permissions import ProjectEventPermission
from pulse_core.ledger.api.serializers import EventSubmitSerializer, ProjectEventSerializer
from pulse_core.ledger.policy import ensure_can_view
from pulse_core.ledger.selectors import LedgerSelectors
from pulse_core.ledger.serializers import RiskResolveInputSerializer
from pulse_core.ledger.services import LedgerService
from pulse_core.projects.selectors import ProjectSelectors


class ProjectEventViewSet(viewsets.ViewSet):
    """
    Ledger of one project, nested under /projects/{project_id}/events/.
    Events are append-only: no update or destroy routes.
    """

    permission_classes = [ProjectEventPermission]
    serializer_class = ProjectEventSerializer

    def _visible_project(self, request, project_id):
        project = ProjectSelectors.get_project(project_id=project_id)
        if project is None:
            raise NotFound("Project not found")
        ensure_can_view(requester_from_user(request.user), project)
        return project

    @extend_schema(tags=["Events"], responses={200: ProjectEventSerializer(many=True)})
    def list(self, request, project_id=None):
        self._visible_project(request, project_id)
        qs = LedgerService.list_events(project_id=project_id)
        qs = LedgerSelectors.filter_events(qs, request.query_params)
        return paginate(request, qs, ProjectEventSerializer)

    @extend_schema(tags=["Events"], request=EventSubmitSerializer, responses={201: ProjectEventSerializer})
    def create(self, request, project_id=None):
        data = request.data or {}
        event = LedgerService.submit_event(
            project_id=project_id,
            requester=requester_from_user(request.user),
            event_type=data.get("type"),
            fields=data,
        )
        return Response(ProjectEventSerializer(event).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Events"], request=RiskResolveInputSerializer, responses={200: ProjectEventSerializer})
    def resolve(self, request, project_id=None, pk=None):
        ser = RiskResolveInputSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        event = LedgerService.resolve_risk(
            project_id=project_id,
            event_id=pk,
            requester=requester_from_user(request.user),
            **ser.validated_data,
        )
        return Response(ProjectEventSerializer(event).data, status=status.HTTP_200_OK)
