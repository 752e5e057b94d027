# backend/dw_core/custom_fields/tests/test_custom_fields.py
import pytest
from rest_framework.exceptions import ValidationError

from dw_core.custom_fields.services import CustomFieldService, validate_custom_values

pytestmark = pytest.mark.django_db

URL = "/api/v1/custom-fields/"


def test_create_derives_key_and_filters_by_module(api_client, headers):
    res = api_client.post(URL, {"module": "Assets", "name": "Cost Center"}, format="json", **headers)
    assert res.status_code == 201, res.content
    assert res.json()["key"] == "cost_center"

    api_client.post(URL, {"module": "Tickets", "name": "Channel"}, format="json", **headers)

    res = api_client.get(URL + "?module=Assets", **headers)
    assert [f["key"] for f in res.json()] == ["cost_center"]


def test_duplicate_key_in_module_conflicts(api_client, headers):
    api_client.post(URL, {"module": "Tickets", "name": "Channel"}, format="json", **headers)
    res = api_client.post(URL, {"module": "Tickets", "name": "channel"}, format="json", **headers)
    assert res.status_code == 409


def test_invalid_module_lists_allowed_values(api_client, headers):
    res = api_client.post(URL, {"module": "Invoices", "name": "X"}, format="json", **headers)
    assert res.status_code == 400
    assert "Tickets, Assets, Clients" in str(res.json()["details"])


def test_dropdown_requires_options(api_client, headers):
    res = api_client.post(
        URL, {"module": "Tickets", "name": "Tier", "field_type": "Dropdown"}, format="json", **headers
    )
    assert res.status_code == 400


def _define(organization, user, **data):
    payload = {"module": "Tickets", "field_type": "Text", "required": False, "options": [], "sort_order": 0}
    payload.update(data)
    return CustomFieldService.create(org_id=organization.id, actor_user_id=user.id, data=payload)


def test_validate_custom_values(organization, user):
    _define(organization, user, name="Channel", field_type="Dropdown", options=["Email", "Phone"], required=True)
    _define(organization, user, name="Hours", field_type="Number")
    _define(organization, user, name="Due", field_type="Date")

    out = validate_custom_values(
        org_id=organization.id,
        module="Tickets",
        values={"channel": "Email", "hours": 2.5, "due": "2026-01-31"},
    )
    assert out == {"channel": "Email", "hours": 2.5, "due": "2026-01-31"}


def test_validate_custom_values_rejects_unknown_missing_and_bad_types(organization, user):
    _define(organization, user, name="Channel", field_type="Dropdown", options=["Email"], required=True)
    _define(organization, user, name="Hours", field_type="Number")

    with pytest.raises(ValidationError) as exc:
        validate_custom_values(
            org_id=organization.id,
            module="Tickets",
            values={"hours": "three", "color": "red"},
        )

    errors = exc.value.detail["custom_fields"]
    assert set(errors.keys()) == {"hours", "color", "channel"}


def test_required_value_satisfied_by_existing_bag(organization, user):
    _define(organization, user, name="Channel", required=True)
    out = validate_custom_values(
        org_id=organization.id, module="Tickets", values={}, existing={"channel": "Phone"}
    )
    assert out == {"channel": "Phone"}
