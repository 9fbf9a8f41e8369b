from datetime import timedelta

import pytest
from django.utils.timezone import now

from pulse_core.accounts.context import requester_from_user
from pulse_core.common.api.exceptions import ConflictError
from pulse_core.ledger.constants import EventType
from pulse_core.ledger.models import ProjectEvent
from pulse_core.ledger.rate_limit import WEEKLY_CHECKIN_MSG, check_checkin_allowed, has_recent_checkin
from pulse_core.ledger.services import LedgerService
from pulse_core.projects.models import Project

pytestmark = pytest.mark.django_db


def checkin(project, requester, at):
    return LedgerService.submit_event(
        project_id=project.pk,
        requester=requester,
        event_type=EventType.CHECKIN,
        fields={"progress_summary": "Sprint done", "confidence_level": 4},
        timestamp=at,
    )


def test_second_checkin_within_a_week_is_rejected(project, as_employee):
    first = now() - timedelta(days=20)
    checkin(project, as_employee, first)

    with pytest.raises(ConflictError) as exc:
        checkin(project, as_employee, first + timedelta(days=6, hours=23))

    assert str(exc.value.detail) == WEEKLY_CHECKIN_MSG
    assert ProjectEvent.objects.filter(project=project, type=EventType.CHECKIN).count() == 1


def test_checkin_after_seven_days_is_allowed(project, as_employee):
    first = now() - timedelta(days=20)
    checkin(project, as_employee, first)
    checkin(project, as_employee, first + timedelta(days=7, hours=1))

    assert ProjectEvent.objects.filter(project=project, type=EventType.CHECKIN).count() == 2


def test_window_is_per_user(project, as_employee, other_employee):
    project.employees.add(other_employee)
    as_other = requester_from_user(other_employee)
    at = now() - timedelta(days=1)

    checkin(project, as_other, at)
    checkin(project, as_employee, at + timedelta(minutes=5))

    with pytest.raises(ConflictError):
        checkin(project, as_employee, at + timedelta(hours=1))


def test_window_is_per_project(project, as_employee, employee, client_user):
    second = Project.objects.create(
        name="Second",
        description="",
        client=client_user,
        start_date=project.start_date,
        end_date=project.end_date,
    )
    second.employees.add(employee)
    at = now()

    checkin(project, as_employee, at)
    checkin(second, as_employee, at)

    assert ProjectEvent.objects.filter(user=employee, type=EventType.CHECKIN).count() == 2


def test_other_event_types_do_not_count(project, employee):
    ProjectEvent.objects.create(
        project=project,
        user=employee,
        type=EventType.RISK,
        title="Late API",
        timestamp=now(),
    )
    assert not has_recent_checkin(project_id=project.pk, user_id=employee.pk, now=now())
    check_checkin_allowed(project_id=project.pk, user_id=employee.pk, now=now())
