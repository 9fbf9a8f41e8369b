import pytest

from pulse_core.ledger.constants import EventType, RiskStatus
from pulse_core.ledger.models import ProjectEvent

pytestmark = pytest.mark.django_db


def events_url(project):
    return f"/api/v1/projects/{project.pk}/events/"


def test_employee_checks_in_once_per_week(client_for, employee, project):
    api = client_for(employee)
    payload = {"type": "CHECKIN", "progress_summary": "Auth done", "confidence_level": 4, "completion_percent": 35}

    first = api.post(events_url(project), payload, format="json")
    assert first.status_code == 201, first.content
    body = first.json()
    assert body["type"] == "CHECKIN"
    assert body["user_name"] == "Erin Dev"
    assert body["completion_percent"] == 35

    second = api.post(events_url(project), payload, format="json")
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "conflict"
    assert second.json()["error"]["message"] == "Weekly check-in already submitted for this project."


def test_client_feedback_with_flag_opens_risk(client_for, client_user, project):
    res = client_for(client_user).post(
        events_url(project),
        {"type": "FEEDBACK", "satisfaction_rating": 3, "clarity_rating": 4, "flag_issue": True},
        format="json",
    )

    assert res.status_code == 201
    risk = ProjectEvent.objects.get(project=project, type=EventType.RISK)
    assert risk.risk_status == RiskStatus.OPEN


def test_employee_feedback_is_forbidden(client_for, employee, project):
    res = client_for(employee).post(events_url(project), {"type": "FEEDBACK", "satisfaction_rating": 5}, format="json")

    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Only the assigned client can submit feedback."


def test_unknown_event_type_is_rejected(client_for, admin_user, project):
    res = client_for(admin_user).post(events_url(project), {"type": "MEMO", "title": "hi"}, format="json")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"
    assert "type" in res.json()["error"]["details"]


def test_list_events_newest_first_with_type_filter(client_for, employee, client_user, project):
    client_for(employee).post(events_url(project), {"type": "RISK", "title": "Late vendor"}, format="json")
    client_for(client_user).post(events_url(project), {"type": "FEEDBACK", "satisfaction_rating": 4}, format="json")

    api = client_for(client_user)
    res = api.get(events_url(project))
    assert res.status_code == 200
    assert [e["type"] for e in res.json()["results"]] == ["FEEDBACK", "RISK"]

    res = api.get(events_url(project), {"type": "RISK"})
    assert [e["title"] for e in res.json()["results"]] == ["Late vendor"]


def test_outsider_cannot_read_ledger(client_for, other_client, project):
    res = client_for(other_client).get(events_url(project))
    assert res.status_code == 404


def test_employee_resolves_risk(client_for, employee, project):
    api = client_for(employee)
    risk_id = api.post(events_url(project), {"type": "RISK", "title": "DB load"}, format="json").json()["id"]

    res = api.patch(
        f"{events_url(project)}{risk_id}/resolve/",
        {"mitigation": "Added read replica"},
        format="json",
    )

    assert res.status_code == 200
    assert res.json()["risk_status"] == "RESOLVED"
    assert res.json()["mitigation"] == "Added read replica"
    assert ProjectEvent.objects.filter(project=project, title="Risk Resolved: DB load").count() == 1


def test_client_cannot_reach_resolve(client_for, employee, client_user, project):
    risk_id = (
        client_for(employee).post(events_url(project), {"type": "RISK", "title": "DB load"}, format="json").json()["id"]
    )

    res = client_for(client_user).patch(f"{events_url(project)}{risk_id}/resolve/", {}, format="json")

    assert res.status_code == 403
