# backend/dw_core/settings_registry/tests/test_settings_api.py
import pytest

from dw_core.conftest import org_headers
from dw_core.settings_registry.models import SettingItem

pytestmark = pytest.mark.django_db

ASSET_URL = "/api/v1/settings/asset-settings/"
TICKET_URL = "/api/v1/settings/ticket-settings/"


def _create(api_client, headers, url=ASSET_URL, **payload):
    return api_client.post(url, payload, format="json", **headers)


def test_create_and_list_by_type(api_client, headers):
    res = _create(api_client, headers, kind="category", name="Laptops", color="#112233")
    assert res.status_code == 201, res.content
    assert res.json()["module"] == "asset"
    assert res.json()["kind"] == "category"

    _create(api_client, headers, kind="location", name="HQ")

    res = api_client.get(ASSET_URL + "?type=category", **headers)
    assert res.status_code == 200
    names = [r["name"] for r in res.json()]
    assert names == ["Laptops"]


def test_duplicate_name_is_case_insensitive_conflict(api_client, headers):
    assert _create(api_client, headers, kind="category", name="Servers").status_code == 201

    res = _create(api_client, headers, kind="category", name="servers")
    assert res.status_code == 409
    assert res.json()["code"] == "conflict"


def test_same_name_allowed_in_other_kind(api_client, headers):
    assert _create(api_client, headers, kind="category", name="Main").status_code == 201
    assert _create(api_client, headers, kind="location", name="Main").status_code == 201


def test_kind_must_belong_to_module(api_client, headers):
    res = _create(api_client, headers, kind="priority", name="P1")
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_rename_onto_existing_name_conflicts(api_client, headers):
    _create(api_client, headers, kind="status", name="Active")
    other = _create(api_client, headers, kind="status", name="Retired").json()

    res = api_client.patch(f"{ASSET_URL}{other['id']}/", {"name": "ACTIVE"}, format="json", **headers)
    assert res.status_code == 409


def test_kind_is_immutable(api_client, headers):
    item = _create(api_client, headers, kind="status", name="Active").json()
    res = api_client.patch(f"{ASSET_URL}{item['id']}/", {"kind": "category"}, format="json", **headers)
    assert res.status_code == 400


def test_get_with_mismatched_type_is_404(api_client, headers):
    item = _create(api_client, headers, kind="status", name="Active").json()
    res = api_client.get(f"{ASSET_URL}{item['id']}/?type=category", **headers)
    assert res.status_code == 404


def test_setting_from_other_module_is_404(api_client, headers):
    item = _create(api_client, headers, kind="status", name="Active").json()
    res = api_client.get(f"{TICKET_URL}{item['id']}/", **headers)
    assert res.status_code == 404


def test_delete_is_soft(api_client, headers):
    item = _create(api_client, headers, kind="location", name="Basement").json()

    res = api_client.delete(f"{ASSET_URL}{item['id']}/", **headers)
    assert res.status_code == 204

    assert api_client.get(f"{ASSET_URL}{item['id']}/", **headers).status_code == 404
    assert SettingItem.objects.get(id=item["id"]).is_deleted is True

    # name is free again once the old row is deleted
    assert _create(api_client, headers, kind="location", name="Basement").status_code == 201


def test_system_setting_cannot_be_deleted(api_client, headers):
    api_client.post(TICKET_URL + "initialize/", {}, format="json", **headers)
    open_status = SettingItem.objects.get(module="ticket", kind="status", name="Open")

    res = api_client.delete(f"{TICKET_URL}{open_status.id}/", **headers)
    assert res.status_code == 409


def test_initialize_is_idempotent(api_client, headers):
    first = api_client.post(TICKET_URL + "initialize/", {}, format="json", **headers)
    assert first.status_code == 201
    assert len(first.json()) == 13

    second = api_client.post(TICKET_URL + "initialize/", {}, format="json", **headers)
    assert second.status_code == 201
    assert second.json() == []


def test_initialize_keeps_existing_default(api_client, headers):
    mine = _create(api_client, headers, url=TICKET_URL, kind="queue", name="Escalations", is_default=True)
    assert mine.status_code == 201

    api_client.post(TICKET_URL + "initialize/", {}, format="json", **headers)

    defaults = SettingItem.objects.filter(module="ticket", kind="queue", is_default=True, is_deleted=False)
    assert [d.name for d in defaults] == ["Escalations"]


def test_only_one_default_per_kind(api_client, headers):
    a = _create(api_client, headers, kind="status", name="Active", is_default=True).json()
    b = _create(api_client, headers, kind="status", name="Spare", is_default=True).json()

    assert SettingItem.objects.get(id=a["id"]).is_default is False
    assert SettingItem.objects.get(id=b["id"]).is_default is True


def test_metadata_is_validated_per_kind(api_client, headers):
    res = _create(api_client, headers, kind="category", name="Odd", metadata={"depreciation_rate": 250})
    assert res.status_code == 400


def test_stats(api_client, headers):
    api_client.post(ASSET_URL + "initialize/", {}, format="json", **headers)
    res = api_client.get(ASSET_URL + "stats/", **headers)
    assert res.status_code == 200
    body = res.json()
    assert body["by_kind"]["category"] == 5
    assert body["by_kind"]["status"] == 6
    assert body["total"] == 11


def test_settings_are_org_scoped(api_client, headers, user, other_organization):
    from dw_core.conftest import _add_member

    _create(api_client, headers, kind="location", name="Mine")
    _add_member(user, other_organization, role_code="admin", role_name="Administrator")

    res = api_client.get(ASSET_URL, **org_headers(other_organization))
    assert res.status_code == 200
    assert res.json() == []


def test_readonly_member_cannot_create(readonly_client, headers):
    res = readonly_client.post(ASSET_URL, {"kind": "location", "name": "X"}, format="json", **headers)
    assert res.status_code == 403


def test_stats_counts_every_row_of_a_kind(api_client, headers):
    for name in ("Servers", "Laptops", "Printers"):
        _create(api_client, headers, kind="category", name=name)
    _create(api_client, headers, kind="location", name="HQ")

    body = api_client.get(ASSET_URL + "stats/", **headers).json()
    assert body["by_kind"]["category"] == 3
    assert body["by_kind"]["location"] == 1
    assert body["total"] == 4


def test_in_use_setting_cannot_be_renamed(api_client, headers):
    item = _create(api_client, headers, kind="category", name="Servers").json()
    asset = api_client.post(
        "/api/v1/assets/", {"name": "SRV-01", "client": "Acme Corp", "type": "Server", "category": "Servers"},
        format="json", **headers,
    ).json()

    res = api_client.patch(f"{ASSET_URL}{item['id']}/", {"name": "Legacy"}, format="json", **headers)
    assert res.status_code == 409
    assert SettingItem.objects.get(id=item["id"]).name == "Servers"
    assert api_client.delete(f"{ASSET_URL}{item['id']}/", **headers).status_code == 409

    # other fields stay editable, and the rename goes through once nothing references it
    res = api_client.patch(f"{ASSET_URL}{item['id']}/", {"name": "Servers", "color": "#000000"}, format="json", **headers)
    assert res.status_code == 200

    api_client.delete(f"/api/v1/assets/{asset['id']}/", **headers)
    res = api_client.patch(f"{ASSET_URL}{item['id']}/", {"name": "Legacy"}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["name"] == "Legacy"
