# pulse_core/accounts/services.py
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from pulse_core.accounts.context import Requester
from pulse_core.common.api.exceptions import ConflictError
from pulse_core.common.permissions import ALL_ROLES

logger = logging.getLogger(__name__)


class UserService:
    """
    Admin-side user management. Roles are Django auth Groups.
    """

    @staticmethod
    def _require_admin(requester: Requester) -> None:
        if not requester.is_admin:
            raise PermissionDenied("Only admins can manage users.")

    @staticmethod
    @transaction.atomic
    def create_user(
        *,
        requester: Requester,
        username: str,
        password: str,
        role: str,
        email: str = "",
        first_name: str = "",
        last_name: str = "",
    ):
        UserService._require_admin(requester)

        if role not in ALL_ROLES:
            raise ValidationError({"role": f"Unknown role '{role}'."})

        User = get_user_model()
        if email and User.objects.filter(email__iexact=email).exists():
            raise ConflictError("A user with this email already exists.")

        try:
            user = User.objects.create_user(
                username=username,
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
            )
        except IntegrityError:
            raise ConflictError("A user with this username already exists.")

        group, _ = Group.objects.get_or_create(name=role)
        user.groups.add(group)

        logger.info("User %s created with role %s by user %s", user.pk, role, requester.user_id)
        return user

    @staticmethod
    @transaction.atomic
    def delete_user(*, requester: Requester, user_id: int) -> None:
        UserService._require_admin(requester)

        if int(user_id) == requester.user_id:
            raise ValidationError({"detail": "You cannot delete your own account."})

        User = get_user_model()
        try:
            user = User.objects.get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound("User not found")

        try:
            user.delete()
        except ProtectedError:
            raise ConflictError("User still owns projects as client. Reassign them first.")

        logger.info("User %s deleted by user %s", user_id, requester.user_id)
