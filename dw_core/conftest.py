# backend/conftest.py
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from dw_core.organizations.models import Organization


def org_headers(organization):
    """
    Organization scope header used by the request-context resolver.
    DRF test client requires HTTP_ prefix.
    """
    return {"HTTP_X_ORG_ID": str(organization.id)}


def _add_member(user, organization, *, role_code, role_name):
    from dw_core.iam.models import OrganizationMembership, Role, UserProfile

    profile, _ = UserProfile.objects.get_or_create(
        user=user,
        defaults={"organization": organization, "is_active": True},
    )
    role, _ = Role.objects.get_or_create(
        organization=organization,
        code=role_code,
        defaults={"name": role_name, "is_active": True},
    )
    OrganizationMembership.objects.create(
        organization=organization,
        user_profile=profile,
        role=role,
        is_active=True,
        is_primary=True,
    )
    return profile


@pytest.fixture
def organization(db):
    return Organization.objects.create(name="Acme IT", subdomain="acme")


@pytest.fixture
def user(db, organization):
    """
    Test user with ADMIN group + organization membership.
    Matches the membership graph:
      auth_user -> UserProfile -> OrganizationMembership -> Organization
    """
    User = get_user_model()
    user = User.objects.create_user(
        username="testuser",
        email="testuser@acme.test",
        password="testpass",
        is_active=True,
    )

    admin_group, _ = Group.objects.get_or_create(name="ADMIN")
    user.groups.add(admin_group)

    _add_member(user, organization, role_code="admin", role_name="Administrator")
    return user


@pytest.fixture
def readonly_user(db, organization):
    User = get_user_model()
    u = User.objects.create_user(username="viewer", email="viewer@acme.test", password="testpass")
    _add_member(u, organization, role_code="readonly", role_name="Read Only")
    return u


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def readonly_client(readonly_user):
    c = APIClient()
    c.force_authenticate(user=readonly_user)
    return c


@pytest.fixture
def headers(organization):
    return org_headers(organization)


@pytest.fixture
def other_organization(db):
    return Organization.objects.create(name="Globex", subdomain="globex")
