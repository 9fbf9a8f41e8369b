# pulse_core/accounts/context.py
from __future__ import annotations

from dataclasses import dataclass

from rest_framework.exceptions import NotAuthenticated

from pulse_core.common.permissions import ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE, primary_role


@dataclass(frozen=True)
class Requester:
    """
    Who is asking. Built once per request and passed explicitly to every
    service call; services never look at request/session state themselves.
    """
    user_id: int
    role: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_employee(self) -> bool:
        return self.role == ROLE_EMPLOYEE

    @property
    def is_client(self) -> bool:
        return self.role == ROLE_CLIENT


def requester_from_user(user) -> Requester:
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated()
    return Requester(user_id=user.id, role=primary_role(user))
