# backend/dw_core/iam/tests/test_auth_and_me.py
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

pytestmark = pytest.mark.django_db


def test_me_requires_auth():
    """
    Do NOT use the api_client fixture here: it is already authenticated.
    """
    c = APIClient()
    res = c.get("/api/me/")
    assert res.status_code in (401, 403)


def test_login_sets_cookies(user, settings):
    user.set_password("Pass@12345")
    user.save(update_fields=["password"])

    c = APIClient()
    res = c.post("/api/v1/auth/login/", {"username": "testuser", "password": "Pass@12345"}, format="json")
    assert res.status_code == 200

    assert settings.SIMPLE_JWT["AUTH_COOKIE"] in res.cookies
    assert settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"] in res.cookies
    assert [o["subdomain"] for o in res.json()["organizations"]] == ["acme"]


def test_login_with_wrong_password_uses_error_envelope(user):
    res = APIClient().post("/api/v1/auth/login/", {"username": "testuser", "password": "nope"}, format="json")
    assert res.status_code == 401
    assert res.json()["code"] == "not_authenticated"
    assert res.has_header("WWW-Authenticate")


def test_login_ignores_stale_access_cookie(user, settings):
    user.set_password("Pass@12345")
    user.save(update_fields=["password"])

    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = "expired.or.garbage"
    res = c.post("/api/v1/auth/login/", {"username": "testuser", "password": "Pass@12345"}, format="json")
    assert res.status_code == 200


def test_refresh_with_bad_token_is_401(settings):
    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"]] = "not-a-token"
    res = c.post("/api/v1/auth/refresh/", {}, format="json")
    assert res.status_code == 401
    assert res.json()["code"] == "not_authenticated"


def test_me_returns_memberships_and_active_org(api_client, user, headers):
    res = api_client.get("/api/v1/me/", **headers)
    assert res.status_code == 200

    body = res.json()
    assert body["user"]["id"] == user.id
    assert [m["role_code"] for m in body["organizations"]] == ["admin"]
    assert body["active_org"]["role_code"] == "admin"
    assert body["active_org"]["enabled_modules"]["tickets"] is True


def test_me_without_header_has_no_active_org(api_client):
    res = api_client.get("/api/v1/me/")
    assert res.status_code == 200
    assert res.json()["active_org"] is None


def test_jwt_scope_blocks_non_member(user, other_organization):
    """
    Uses a real JWT so CookieOrHeaderJWTAuthentication runs the scope resolver.
    """
    client = APIClient()
    access = str(RefreshToken.for_user(user).access_token)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

    res = client.get("/api/v1/tickets/", HTTP_X_ORG_ID=str(other_organization.id))
    assert res.status_code == 403
    assert res.json()["code"] == "permission_denied"


def test_jwt_scope_accepts_member(user, headers):
    client = APIClient()
    access = str(RefreshToken.for_user(user).access_token)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

    res = client.get("/api/v1/tickets/", **headers)
    assert res.status_code == 200


def test_missing_and_malformed_org_header(api_client):
    res = api_client.get("/api/v1/assets/")
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"

    res = api_client.get("/api/v1/assets/", HTTP_X_ORG_ID="not-a-uuid")
    assert res.status_code == 400
