# backend/dw_core/common/management/commands/ensure_roles.py

from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from dw_core.common.permissions import ROLE_ADMIN, ROLE_MANAGER, ROLE_READONLY, ROLE_TECHNICIAN

ROLE_GROUPS = [ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN, ROLE_READONLY]


class Command(BaseCommand):
    help = "Ensure role groups and every organization's built-in roles exist (idempotent)."

    def handle(self, *args, **options):
        from dw_core.iam.services.roles import ensure_default_roles
        from dw_core.organizations.models import Organization

        created = 0
        for name in ROLE_GROUPS:
            _, was_created = Group.objects.get_or_create(name=name)
            created += 1 if was_created else 0

        orgs = 0
        for org in Organization.objects.filter(is_deleted=False):
            ensure_default_roles(org)
            orgs += 1

        self.stdout.write(self.style.SUCCESS(f"Roles ensured. New groups: {created}. Organizations checked: {orgs}"))
