from io import StringIO

import pytest
from django.contrib.auth.models import Group
from django.core.management import call_command
from django.core.management.base import CommandError
from rest_framework.exceptions import NotFound, ValidationError

from pulse_core.common import events
from pulse_core.common.api.exceptions import ConflictError, error_code, split_message
from pulse_core.conftest import make_user


def test_publish_calls_each_handler_once():
    seen = []

    @events.subscribe("test.ping")
    def handler(payload):
        seen.append(payload["n"])

    events.subscribe("test.ping")(handler)

    assert events.publish("test.ping", {"n": 1}) == 1
    assert seen == [1]


def test_publish_without_handlers_is_a_noop():
    assert events.publish("test.nobody-listens", {}) == 0


def test_handler_errors_reach_the_publisher():
    @events.subscribe("test.boom")
    def handler(payload):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        events.publish("test.boom", {})


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"detail": "Project not found"}, ("Project not found", None)),
        ({"detail": ["Only risk events can be resolved"]}, ("Only risk events can be resolved", None)),
        ({"detail": "Bad", "field": ["x"]}, ("Bad", {"field": ["x"]})),
        (["Single message"], ("Single message", None)),
        ({"title": ["required"]}, ("Request failed.", {"title": ["required"]})),
    ],
)
def test_split_message(data, expected):
    assert split_message(data) == expected


def test_error_codes():
    assert error_code(ValidationError("x"), 400) == "validation_error"
    assert error_code(NotFound(), 404) == "not_found"
    assert error_code(ConflictError("x"), 409) == "conflict"
    assert error_code(RuntimeError(), 500) == "server_error"


@pytest.mark.django_db
def test_ensure_roles_creates_groups_and_assigns():
    user = make_user("ops", None)
    Group.objects.all().delete()

    out = StringIO()
    call_command("ensure_roles", "--assign", "ops=admin", stdout=out)

    assert set(Group.objects.values_list("name", flat=True)) == {"ADMIN", "EMPLOYEE", "CLIENT"}
    assert list(user.groups.values_list("name", flat=True)) == ["ADMIN"]
    assert "ops -> ADMIN" in out.getvalue()


@pytest.mark.django_db
def test_ensure_roles_rejects_unknown_role():
    make_user("ops", None)
    with pytest.raises(CommandError):
        call_command("ensure_roles", "--assign", "ops=OWNER")
