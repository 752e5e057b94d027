# backend/dw_core/organizations/tests/test_organization_api.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from dw_core.iam.models import OrganizationMembership
from dw_core.organizations.models import Organization

pytestmark = pytest.mark.django_db


def _client_for(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


def test_get_and_patch_organization(api_client, headers):
    res = api_client.get("/api/v1/organization/", **headers)
    assert res.status_code == 200
    assert res.json()["subdomain"] == "acme"

    res = api_client.patch(
        "/api/v1/organization/",
        {"name": "Acme Managed IT", "settings": {"max_users_allowed": 50}},
        format="json",
        **headers,
    )
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["name"] == "Acme Managed IT"
    assert body["settings"]["max_users_allowed"] == 50
    assert body["settings"]["data_retention_days"] == 365


def test_readonly_member_cannot_patch_organization(readonly_client, headers):
    assert readonly_client.get("/api/v1/organization/", **headers).status_code == 200
    res = readonly_client.patch("/api/v1/organization/", {"name": "x"}, format="json", **headers)
    assert res.status_code == 403


def test_module_toggles(api_client, headers):
    res = api_client.put("/api/v1/settings/modules/", {"enabled_modules": {"quotes": True}}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["enabled_modules"]["quotes"] is True

    res = api_client.put("/api/v1/settings/modules/", {"enabled_modules": {"warp_drive": True}}, format="json", **headers)
    assert res.status_code == 400
    assert "warp_drive" in str(res.json()["details"])

    res = api_client.put("/api/v1/settings/modules/", {"enabled_modules": {"tickets": "yes"}}, format="json", **headers)
    assert res.status_code == 400


def test_internal_it_mode_disables_msp_modules(api_client, headers):
    api_client.put("/api/v1/settings/modules/", {"enabled_modules": {"quotes": True}}, format="json", **headers)

    res = api_client.put(
        "/api/v1/settings/modules/",
        {"enabled_modules": {"projects": True}, "is_internal_it_mode": True},
        format="json",
        **headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["is_internal_it_mode"] is True
    assert body["enabled_modules"]["quotes"] is False

    res = api_client.put("/api/v1/settings/modules/", {"enabled_modules": {"billing": True}}, format="json", **headers)
    assert res.status_code == 400


def test_setup_user_creates_org_once():
    User = get_user_model()
    u = User.objects.create_user(username="jo", email="jo@globex.io", password="x")
    c = _client_for(u)

    res = c.post("/api/v1/auth/setup-user/", {}, format="json")
    assert res.status_code == 201, res.content
    body = res.json()
    assert body["organization_name"] == "Globex"
    assert body["requires_session_refresh"] is True

    m = OrganizationMembership.objects.get(user_profile__user=u)
    assert m.role.code == "admin"
    assert str(m.organization_id) == body["organization_id"]

    res = c.post("/api/v1/auth/setup-user/", {}, format="json")
    assert res.status_code == 200
    assert res.json()["message"] == "User already has organization"
    assert Organization.objects.filter(name="Globex").count() == 1


def test_setup_user_requires_email():
    User = get_user_model()
    u = User.objects.create_user(username="noemail", password="x")
    res = _client_for(u).post("/api/v1/auth/setup-user/", {}, format="json")
    assert res.status_code == 400


def test_subdomain_is_unique(organization):
    from dw_core.organizations.services import OrganizationService

    org = OrganizationService.create(name="Acme")
    assert org.subdomain == "acme-2"
