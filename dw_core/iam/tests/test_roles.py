# backend/dw_core/iam/tests/test_roles.py
import pytest
from django.contrib.auth.models import Group
from django.core.management import call_command

from dw_core.common.permissions import _user_roles
from dw_core.iam.models import Role

pytestmark = pytest.mark.django_db


def test_ensure_roles_is_idempotent(organization):
    call_command("ensure_roles")
    call_command("ensure_roles")

    assert set(Group.objects.values_list("name", flat=True)) >= {"ADMIN", "MANAGER", "TECHNICIAN", "READONLY"}
    assert set(Role.objects.filter(organization=organization).values_list("code", flat=True)) == {
        "admin", "manager", "technician", "readonly",
    }


def test_membership_role_is_resolved_per_org(readonly_user, organization, other_organization):
    assert _user_roles(readonly_user, organization.id) == {"READONLY"}
    # no membership in the other org: authenticated users fall back to READONLY
    assert _user_roles(readonly_user, other_organization.id) == {"READONLY"}


def test_superuser_is_admin(db):
    from django.contrib.auth import get_user_model

    su = get_user_model().objects.create_superuser(username="root", email="root@x.io", password="x")
    assert _user_roles(su) == {"ADMIN"}
