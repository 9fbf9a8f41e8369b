# pulse_core/conftest.py
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils.timezone import now
from rest_framework.test import APIClient

from pulse_core.accounts.context import requester_from_user
from pulse_core.common.permissions import ALL_ROLES, ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE
from pulse_core.projects.models import Project


def make_user(username: str, role: str | None, **extra):
    for name in ALL_ROLES:
        Group.objects.get_or_create(name=name)

    User = get_user_model()
    u = User.objects.create_user(username=username, password="pass12345", **extra)
    if role:
        u.groups.add(Group.objects.get(name=role))
    return u


@pytest.fixture
def admin_user(db):
    return make_user("admin", ROLE_ADMIN)


@pytest.fixture
def employee(db):
    return make_user("emp", ROLE_EMPLOYEE, first_name="Erin", last_name="Dev")


@pytest.fixture
def other_employee(db):
    return make_user("emp2", ROLE_EMPLOYEE)


@pytest.fixture
def client_user(db):
    return make_user("client", ROLE_CLIENT, first_name="Acme")


@pytest.fixture
def other_client(db):
    return make_user("client2", ROLE_CLIENT)


@pytest.fixture
def admin(admin_user):
    return requester_from_user(admin_user)


@pytest.fixture
def as_employee(employee):
    return requester_from_user(employee)


@pytest.fixture
def as_client(client_user):
    return requester_from_user(client_user)


@pytest.fixture
def project(db, client_user, employee):
    """
    Half-way through a 100 day window with no progress reported.
    Built directly (no initialization entry) so the ledger starts empty.
    """
    start = now() - timedelta(days=50)
    p = Project.objects.create(
        name="Website Revamp",
        description="Marketing site rebuild",
        client=client_user,
        start_date=start,
        end_date=start + timedelta(days=100),
        progress=0,
    )
    p.employees.set([employee])
    return p


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _client_for
