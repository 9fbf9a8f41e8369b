# pulse_core/common/api/health.py
from __future__ import annotations

from django.db import connection
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthView(APIView):
    """Liveness probe; also touches the database."""

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(tags=["Health"], responses={200: None})
    def get(self, request):
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return Response({"status": "ok", "app": "Project Pulse"}, status=status.HTTP_200_OK)
