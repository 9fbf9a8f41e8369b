# pulse_core/accounts/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from pulse_core.accounts.api.serializers import UserCreateSerializer, UserSerializer
from pulse_core.accounts.context import requester_from_user
from pulse_core.accounts.selectors import list_users
from pulse_core.accounts.services import UserService
from pulse_core.common.api.pagination import paginate
from pulse_core.common.permissions import UserAdminPermission


class UserViewSet(viewsets.ViewSet):
    """
    Admin user management:
    - list (optionally ?role=EMPLOYEE)
    - create with a role
    - destroy
    """

    permission_classes = [UserAdminPermission]
    lookup_value_regex = r"\d+"
    serializer_class = UserSerializer

    @extend_schema(tags=["Users"], responses={200: UserSerializer(many=True)})
    def list(self, request):
        qs = list_users(role=request.query_params.get("role") or None)
        return paginate(request, qs, UserSerializer)

    @extend_schema(tags=["Users"], request=UserCreateSerializer, responses={201: UserSerializer})
    def create(self, request):
        ser = UserCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        user = UserService.create_user(requester=requester_from_user(request.user), **ser.validated_data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Users"], responses={204: None})
    def destroy(self, request, pk=None):
        UserService.delete_user(requester=requester_from_user(request.user), user_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
