from datetime import timedelta

import pytest
from django.utils.timezone import now

from pulse_core.ledger.models import ProjectEvent
from pulse_core.projects.models import Project

pytestmark = pytest.mark.django_db

BASE = "/api/v1/projects/"


def test_anonymous_requests_get_error_envelope(api_client):
    res = api_client.get(BASE)

    assert res.status_code == 401
    body = res.json()
    assert body["error"]["code"] == "not_authenticated"
    assert body["error"]["request_id"]


def test_client_lists_only_own_projects(client_for, client_user, other_client, project):
    Project.objects.create(
        name="Not yours",
        description="",
        client=other_client,
        start_date=project.start_date,
        end_date=project.end_date,
    )

    res = client_for(client_user).get(BASE)

    assert res.status_code == 200
    body = res.json()
    assert body["count"] == 1
    row = body["results"][0]
    assert row["id"] == str(project.pk)
    assert row["client_name"] == "Acme"


def test_list_filters_by_status(client_for, admin_user, project):
    res = client_for(admin_user).get(BASE, {"status": "CRITICAL"})
    assert res.json()["count"] == 0

    res = client_for(admin_user).get(BASE, {"status": project.status})
    assert res.json()["count"] == 1


def test_admin_creates_project(client_for, admin_user, client_user, employee):
    start = now()
    res = client_for(admin_user).post(
        BASE,
        {
            "name": "Data Platform",
            "description": "Warehouse migration",
            "client_id": client_user.pk,
            "employee_ids": [employee.pk],
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=60)).isoformat(),
        },
        format="json",
    )

    assert res.status_code == 201, res.content
    body = res.json()
    assert body["employee_ids"] == [employee.pk]
    assert body["health_score"] == 79
    assert body["status"] == "AT_RISK"
    assert ProjectEvent.objects.filter(project_id=body["id"]).count() == 1


def test_create_rejects_inverted_window(client_for, admin_user, client_user):
    start = now()
    res = client_for(admin_user).post(
        BASE,
        {
            "name": "Backwards",
            "client_id": client_user.pk,
            "start_date": start.isoformat(),
            "end_date": (start - timedelta(days=1)).isoformat(),
        },
        format="json",
    )

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_employee_cannot_create_project(client_for, employee, client_user):
    res = client_for(employee).post(BASE, {"name": "Nope", "client_id": client_user.pk}, format="json")

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"


def test_outsider_gets_not_found_for_foreign_project(client_for, other_client, project):
    res = client_for(other_client).get(f"{BASE}{project.pk}/")

    assert res.status_code == 404
    assert res.json()["error"] == {
        "code": "not_found",
        "message": "Project not found",
        "details": None,
        "request_id": res["X-Request-Id"],
    }


def test_assigned_employee_retrieves_project(client_for, employee, project):
    res = client_for(employee).get(f"{BASE}{project.pk}/")

    assert res.status_code == 200
    assert res.json()["name"] == "Website Revamp"


def test_admin_patches_project(client_for, admin_user, project):
    res = client_for(admin_user).patch(f"{BASE}{project.pk}/", {"progress": 50}, format="json")

    assert res.status_code == 200
    body = res.json()
    assert body["progress"] == 50
    assert body["health_score"] == 79


def test_admin_deletes_project_and_ledger(client_for, admin_user, project, employee):
    ProjectEvent.objects.create(project=project, user=employee, type="RISK", title="x", timestamp=now())

    api = client_for(admin_user)
    res = api.delete(f"{BASE}{project.pk}/")

    assert res.status_code == 204
    assert not ProjectEvent.objects.exists()
    assert api.get(f"{BASE}{project.pk}/events/").status_code == 404


def test_summary(client_for, employee, project):
    res = client_for(employee).get(f"{BASE}summary/")

    assert res.status_code == 200
    assert res.json() == {
        "total": 1,
        "on_track": 1,
        "at_risk": 0,
        "critical": 0,
        "completed": 0,
        "average_health": 100,
    }
