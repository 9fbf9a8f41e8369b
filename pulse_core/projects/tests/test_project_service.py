from datetime import timedelta

import pytest
from django.contrib.auth.models import Group
from django.utils.timezone import now
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from pulse_core.accounts.context import requester_from_user
from pulse_core.conftest import make_user
from pulse_core.ledger.constants import EventType, PROJECT_INITIALIZED_TITLE
from pulse_core.ledger.emit import emit_event
from pulse_core.ledger.models import ProjectEvent
from pulse_core.ledger.services import LedgerService
from pulse_core.projects.models import Project, ProjectStatus
from pulse_core.projects.selectors import ProjectSelectors
from pulse_core.projects.services import ProjectService

pytestmark = pytest.mark.django_db


def _create(admin, client_user, employees=(), **overrides):
    start = now()
    kwargs = {
        "requester": admin,
        "name": "Mobile App",
        "description": "iOS + Android",
        "client_id": client_user.pk,
        "employee_ids": [e.pk for e in employees],
        "start_date": start,
        "end_date": start + timedelta(days=30),
    }
    kwargs.update(overrides)
    return ProjectService.create_project(**kwargs)


def test_create_project_writes_initialization_entry_and_health(admin, client_user, employee):
    project = _create(admin, client_user, [employee])

    assert project.client_id == client_user.pk
    assert project.employee_ids() == {employee.pk}

    events = list(ProjectEvent.objects.filter(project=project))
    assert len(events) == 1
    assert events[0].type == EventType.STATUS_CHANGE
    assert events[0].title == PROJECT_INITIALIZED_TITLE

    # 70*0.4 + 70*0.3 + 100*0.3
    project.refresh_from_db()
    assert project.health_score == 79
    assert project.status == ProjectStatus.AT_RISK


def test_create_project_survives_initialization_entry_failure(admin, client_user, monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr("pulse_core.projects.services.emit_status_change", boom)

    project = _create(admin, client_user)

    assert Project.objects.filter(pk=project.pk).exists()
    assert not ProjectEvent.objects.filter(project=project).exists()


def test_only_admin_creates_projects(as_employee, client_user):
    with pytest.raises(PermissionDenied):
        _create(as_employee, client_user)
    assert Project.objects.count() == 0


def test_create_rejects_inverted_window(admin, client_user):
    start = now()
    with pytest.raises(ValidationError):
        _create(admin, client_user, start_date=start, end_date=start - timedelta(days=1))


def test_create_requires_client_role(admin, employee):
    with pytest.raises(ValidationError):
        _create(admin, employee)


def test_create_requires_employee_role_for_team(admin, client_user, other_client):
    with pytest.raises(ValidationError):
        _create(admin, client_user, [other_client])


def test_get_project_backfills_progress_from_latest_checkin(project, employee):
    Project.objects.filter(pk=project.pk).update(progress=None)
    emit_event(
        project_id=project.pk,
        user_id=employee.pk,
        event_type=EventType.CHECKIN,
        title="Week 1",
        timestamp=now() - timedelta(days=14),
        fields={"completion_percent": 30},
    )
    emit_event(
        project_id=project.pk,
        user_id=employee.pk,
        event_type=EventType.CHECKIN,
        title="Week 3",
        timestamp=now() - timedelta(days=1),
        fields={"completion_percent": 60},
    )

    fetched = ProjectService.get_project(project_id=project.pk)

    assert fetched.progress == 60
    project.refresh_from_db()
    assert project.progress == 60


def test_get_project_keeps_known_progress(project, employee):
    emit_event(
        project_id=project.pk,
        user_id=employee.pk,
        event_type=EventType.CHECKIN,
        title="Week 1",
        fields={"completion_percent": 80},
    )
    assert ProjectService.get_project(project_id=project.pk).progress == 0


def test_get_unknown_project_raises_not_found(db):
    with pytest.raises(NotFound):
        ProjectService.get_project(project_id="00000000-0000-0000-0000-000000000000")


def test_update_project_patches_fields_and_team(admin, project, other_employee):
    updated = ProjectService.update_project(
        requester=admin,
        project_id=project.pk,
        patch={"name": "Website v2", "employee_ids": [other_employee.pk]},
    )

    assert updated.name == "Website v2"
    assert updated.employee_ids() == {other_employee.pk}


def test_update_rejects_window_inversion(admin, project):
    with pytest.raises(ValidationError):
        ProjectService.update_project(
            requester=admin,
            project_id=project.pk,
            patch={"end_date": project.start_date - timedelta(days=1)},
        )


def test_completed_status_survives_health_refresh(admin, project, employee):
    ProjectService.update_project(requester=admin, project_id=project.pk, patch={"status": ProjectStatus.COMPLETED})
    emit_event(
        project_id=project.pk,
        user_id=employee.pk,
        event_type=EventType.RISK,
        title="Vendor delay",
        fields={"risk_status": "OPEN", "severity": "HIGH"},
    )

    project.refresh_from_db()
    result = ProjectService.refresh_health(project=project)

    project.refresh_from_db()
    assert project.status == ProjectStatus.COMPLETED
    assert project.health_score == result.health_score == 54


def test_delete_project_removes_its_ledger(admin, project, employee):
    emit_event(project_id=project.pk, user_id=employee.pk, event_type=EventType.CHECKIN, title="Week 1")
    emit_event(project_id=project.pk, user_id=employee.pk, event_type=EventType.RISK, title="Scope creep")

    ProjectService.delete_project(requester=admin, project_id=project.pk)

    assert not Project.objects.filter(pk=project.pk).exists()
    assert not ProjectEvent.objects.filter(project_id=project.pk).exists()
    with pytest.raises(NotFound):
        LedgerService.list_events(project_id=project.pk)


def test_only_admin_deletes_projects(as_employee, project):
    with pytest.raises(PermissionDenied):
        ProjectService.delete_project(requester=as_employee, project_id=project.pk)
    assert Project.objects.filter(pk=project.pk).exists()


def test_list_for_scopes_by_role(admin, as_employee, as_client, project, other_client):
    start = now()
    other = Project.objects.create(
        name="Other",
        description="",
        client=other_client,
        start_date=start,
        end_date=start + timedelta(days=10),
    )
    outsider = make_user("emp3", "EMPLOYEE")

    assert set(ProjectSelectors.list_for(admin)) == {project, other}
    assert list(ProjectSelectors.list_for(as_employee)) == [project]
    assert list(ProjectSelectors.list_for(as_client)) == [project]
    assert list(ProjectSelectors.list_for(requester_from_user(outsider))) == []


def test_list_for_user_with_both_roles_sees_assigned_and_owned(project, other_client):
    both = make_user("dual", "EMPLOYEE")
    both.groups.add(Group.objects.get(name="CLIENT"))
    project.employees.add(both)
    start = now()
    owned = Project.objects.create(
        name="Own",
        description="",
        client=both,
        start_date=start,
        end_date=start + timedelta(days=10),
    )
    Project.objects.create(
        name="Elsewhere",
        description="",
        client=other_client,
        start_date=start,
        end_date=start + timedelta(days=10),
    )

    requester = requester_from_user(both)
    visible = set(ProjectSelectors.list_for(requester))

    assert requester.is_employee
    assert visible == {project, owned}
    assert ProjectSelectors.portfolio_summary(requester)["total"] == 2


def test_portfolio_summary_counts_visible_projects(admin, as_client, project, other_client):
    start = now()
    Project.objects.create(
        name="Other",
        description="",
        client=other_client,
        start_date=start,
        end_date=start + timedelta(days=10),
        health_score=40,
        status=ProjectStatus.CRITICAL,
    )
    Project.objects.filter(pk=project.pk).update(health_score=85, status=ProjectStatus.ON_TRACK)

    summary = ProjectSelectors.portfolio_summary(admin)
    assert summary == {
        "total": 2,
        "on_track": 1,
        "at_risk": 0,
        "critical": 1,
        "completed": 0,
        "average_health": 63,
    }

    assert ProjectSelectors.portfolio_summary(as_client)["total"] == 1


def test_portfolio_summary_is_zero_when_nothing_visible(as_client):
    assert ProjectSelectors.portfolio_summary(as_client)["average_health"] == 0
