# pulse_core/accounts/selectors.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models import QuerySet


def display_name(user) -> str:
    if user is None:
        return ""
    full = f"{getattr(user, 'first_name', '')} {getattr(user, 'last_name', '')}".strip()
    return full or getattr(user, "username", "") or ""


def list_users(*, role: str | None = None) -> QuerySet:
    qs = get_user_model().objects.prefetch_related("groups").order_by("username")
    if role:
        qs = qs.filter(groups__name=role)
    return qs


def username_for_email(email: str) -> str | None:
    """Username of the one account registered under `email` (case-insensitive)."""
    matches = list(
        get_user_model().objects.filter(email__iexact=email.strip()).values_list("username", flat=True)[:2]
    )
    return matches[0] if len(matches) == 1 else None
