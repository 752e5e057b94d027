# backend/dw_core/common/tests/test_scope_middleware.py
import json

import pytest
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory

from dw_core.common.middleware import OrganizationScopeMiddleware

pytestmark = pytest.mark.django_db


def _run(path, user, **headers):
    request = RequestFactory().get(path, **headers)
    request.user = user
    response = OrganizationScopeMiddleware(lambda r: None).process_request(request)
    return request, response


def test_member_gets_org_context(user, organization, headers):
    request, response = _run("/api/v1/tickets/", user, **headers)
    assert response is None
    assert request.org_id == organization.id
    assert request.org_context.user_id == user.id


def test_missing_header_is_400_with_envelope(user):
    _, response = _run("/api/v1/tickets/", user)
    assert response.status_code == 400
    body = json.loads(response.content)
    assert body["code"] == "validation_error"
    assert body["request_id"]


def test_malformed_header_is_400(user):
    _, response = _run("/api/v1/tickets/", user, HTTP_X_ORG_ID="nope")
    assert response.status_code == 400


def test_non_member_is_403(user, other_organization):
    _, response = _run("/api/v1/tickets/", user, HTTP_X_ORG_ID=str(other_organization.id))
    assert response.status_code == 403
    assert json.loads(response.content)["code"] == "permission_denied"


@pytest.mark.parametrize("path", ["/api/v1/me/", "/api/v1/auth/setup-user/", "/api/v1/auth/login/", "/api/docs/"])
def test_unscoped_paths_pass_without_header(user, path):
    _, response = _run(path, user)
    assert response is None


def test_anonymous_requests_are_left_to_jwt_auth():
    request, response = _run("/api/v1/tickets/", AnonymousUser())
    assert response is None
    assert request.org_context is None
