# pulse_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission, SAFE_METHODS

# Group/role names (Django auth Group names)
ROLE_ADMIN = "ADMIN"
ROLE_EMPLOYEE = "EMPLOYEE"
ROLE_CLIENT = "CLIENT"

ALL_ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT)

# Highest privilege first; used when a user sits in several groups.
ROLE_PRECEDENCE = (ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT)


def user_roles(user) -> Set[str]:
    """
    Resolve roles from:
    1) superuser flag (treated as ADMIN)
    2) Django groups: user.groups
    3) Optional user.role attribute

    Unknown group names are ignored.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    if getattr(user, "role", None):
        roles.add(str(user.role))

    return roles & set(ALL_ROLES)


def primary_role(user) -> str | None:
    roles = user_roles(user)
    for role in ROLE_PRECEDENCE:
        if role in roles:
            return role
    return None


class BaseRolePermission(BasePermission):
    """
    Base permission class for role-based access control.

    Key behavior:
    - Requires authentication (global IsAuthenticated already does this).
    - ADMIN bypass.
    - Uses allowed_roles_per_action for strict RBAC.
    - If action is unknown and request is SAFE, fall back to list/retrieve
      instead of denying.

    Object-level rules (who may submit which event type on which project)
    are NOT decided here; they live in pulse_core.ledger.policy.
    """
    message = "You do not have permission to perform this action."

    allowed_roles_per_action = {
        "list": set(ALL_ROLES),
        "retrieve": set(ALL_ROLES),
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        roles = user_roles(user)

        if ROLE_ADMIN in roles:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            read_action = "retrieve" if is_detail else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return bool(roles & allowed)

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class ProjectPermission(BaseRolePermission):
    """Project metadata is admin-managed; everybody may read what they can see."""
    allowed_roles_per_action = {
        "list": set(ALL_ROLES),
        "retrieve": set(ALL_ROLES),
        "summary": set(ALL_ROLES),
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }


class ProjectEventPermission(BaseRolePermission):
    """
    Any role may reach the ledger endpoints; the per-project access policy
    then decides on the actual submission or resolution.
    """
    allowed_roles_per_action = {
        "list": set(ALL_ROLES),
        "create": set(ALL_ROLES),
        "resolve": {ROLE_ADMIN, ROLE_EMPLOYEE},
    }


class UserAdminPermission(BaseRolePermission):
    """User administration is admin only."""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }
