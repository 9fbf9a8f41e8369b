# pulse_core/common/management/commands/ensure_roles.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from pulse_core.common.permissions import ALL_ROLES


class Command(BaseCommand):
    help = "Create the ADMIN / EMPLOYEE / CLIENT groups (idempotent) and optionally assign users to them."

    def add_arguments(self, parser):
        parser.add_argument(
            "--assign",
            action="append",
            default=[],
            metavar="USERNAME=ROLE",
            help="Add an existing user to a role group. Repeatable.",
        )

    @transaction.atomic
    def handle(self, *args, **opts):
        groups = {}
        created = []
        for name in ALL_ROLES:
            groups[name], was_created = Group.objects.get_or_create(name=name)
            if was_created:
                created.append(name)

        User = get_user_model()
        for item in opts["assign"]:
            username, sep, role = item.partition("=")
            role = role.strip().upper()
            if not sep or role not in groups:
                raise CommandError(f"Expected USERNAME=ROLE with ROLE in {', '.join(ALL_ROLES)}; got {item!r}.")
            try:
                user = User.objects.get(username=username.strip())
            except User.DoesNotExist:
                raise CommandError(f"User {username!r} not found.")
            user.groups.add(groups[role])
            self.stdout.write(f"{user.username} -> {role}")

        self.stdout.write(self.style.SUCCESS(f"Roles ready. Newly created: {', '.join(created) or 'none'}"))
