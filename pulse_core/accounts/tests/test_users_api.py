from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils.timezone import now

from pulse_core.projects.models import Project

pytestmark = pytest.mark.django_db

BASE = "/api/v1/users/"


def test_admin_creates_user_with_role(client_for, admin_user):
    res = client_for(admin_user).post(
        BASE,
        {"username": "newdev", "password": "s3cret-pass", "role": "EMPLOYEE", "first_name": "New"},
        format="json",
    )

    assert res.status_code == 201, res.content
    assert res.json()["role"] == "EMPLOYEE"
    assert res.json()["name"] == "New"
    assert "password" not in res.json()


def test_duplicate_username_is_a_conflict(client_for, admin_user, employee):
    res = client_for(admin_user).post(
        BASE,
        {"username": employee.username, "password": "s3cret-pass", "role": "EMPLOYEE"},
        format="json",
    )
    assert res.status_code == 409


def test_list_users_by_role(client_for, admin_user, employee, client_user):
    res = client_for(admin_user).get(BASE, {"role": "CLIENT"})

    assert res.status_code == 200
    assert [u["username"] for u in res.json()["results"]] == ["client"]


def test_non_admin_cannot_manage_users(client_for, employee):
    assert client_for(employee).get(BASE).status_code == 403


def test_admin_deletes_user(client_for, admin_user, other_employee):
    res = client_for(admin_user).delete(f"{BASE}{other_employee.pk}/")

    assert res.status_code == 204
    assert not get_user_model().objects.filter(pk=other_employee.pk).exists()


def test_admin_cannot_delete_self(client_for, admin_user):
    res = client_for(admin_user).delete(f"{BASE}{admin_user.pk}/")
    assert res.status_code == 400


def test_client_owning_projects_cannot_be_deleted(client_for, admin_user, client_user):
    start = now()
    Project.objects.create(
        name="Kept",
        description="",
        client=client_user,
        start_date=start,
        end_date=start + timedelta(days=1),
    )

    res = client_for(admin_user).delete(f"{BASE}{client_user.pk}/")

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"
