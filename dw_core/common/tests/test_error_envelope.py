# backend/dw_core/common/tests/test_error_envelope.py
from django.test import RequestFactory
from rest_framework.exceptions import ValidationError

from dw_core.common.api.exceptions import ConflictError, NotFoundError, api_exception_handler


def _handle(exc):
    request = RequestFactory().get("/api/v1/assets/")
    return api_exception_handler(exc, {"request": request, "view": None})


def test_conflict():
    res = _handle(ConflictError("Setting is in use."))
    assert res.status_code == 409
    assert res.data["code"] == "conflict"
    assert res.data["error"] == "Setting is in use."
    assert "details" not in res.data


def test_not_found():
    res = _handle(NotFoundError("Asset not found."))
    assert res.status_code == 404
    assert res.data["code"] == "not_found"


def test_field_errors_become_details():
    res = _handle(ValidationError({"type": ['Invalid value "Laptop".']}))
    assert res.status_code == 400
    assert res.data["error"] == "Request failed."
    assert res.data["details"] == 'type: Invalid value "Laptop".'
    assert res.data["fields"] == {"type": ['Invalid value "Laptop".']}


def test_single_message_list():
    res = _handle(ValidationError("Missing organization header. Provide X-Org-Id."))
    assert res.data["error"] == "Missing organization header. Provide X-Org-Id."
    assert "details" not in res.data


def test_unhandled_is_generic_500(settings):
    settings.DEBUG = False
    res = _handle(RuntimeError("db exploded"))
    assert res.status_code == 500
    assert res.data["code"] == "server_error"
    assert res.data["error"] == "Unexpected server error."
    assert "details" not in res.data


def test_error_is_a_plain_string_with_optional_details():
    res = _handle(NotFoundError("Asset not found."))
    assert isinstance(res.data["error"], str)
    assert set(res.data) == {"error", "code", "request_id"}

    res = _handle(ValidationError({"reason": ["This field is required."], "name": ["Too long."]}))
    assert res.data["details"] == "reason: This field is required.; name: Too long."
