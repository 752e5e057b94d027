# backend/dw_core/assets/tests/test_assets_api.py
import pytest

from dw_core.assets.models import Asset
from dw_core.audit.models import AuditEvent
from dw_core.settings_registry.models import SettingItem

pytestmark = pytest.mark.django_db

URL = "/api/v1/assets/"


def _asset(api_client, headers, **overrides):
    payload = {"name": "WKS-01", "client": "Acme Corp", "type": "Workstation"}
    payload.update(overrides)
    res = api_client.post(URL, payload, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def _names(res):
    return [r["name"] for r in res.json()["results"]]


def test_type_filter_includes_and_excludes_workstation(api_client, headers):
    _asset(api_client, headers)

    res = api_client.get(URL + "?type=Workstation", **headers)
    assert res.status_code == 200
    assert "WKS-01" in _names(res)

    res = api_client.get(URL + "?type=Server", **headers)
    assert "WKS-01" not in _names(res)


def test_filters_compose_conjunctively(api_client, headers):
    _asset(api_client, headers, name="A", type="Server", status="Online")
    _asset(api_client, headers, name="B", type="Server", status="Offline")
    _asset(api_client, headers, name="C", type="Printer", status="Online")

    res = api_client.get(URL + "?type=Server,Printer&status=Online", **headers)
    assert sorted(_names(res)) == ["A", "C"]

    res = api_client.get(URL + "?type=Server&status=Online", **headers)
    assert _names(res) == ["A"]


def test_boolean_and_substring_filters(api_client, headers):
    _asset(api_client, headers, name="Secure", client="Initech", is_secure=True)
    _asset(api_client, headers, name="Open", client="Initrode", is_secure=False)

    assert _names(api_client.get(URL + "?is_secure=true", **headers)) == ["Secure"]
    assert _names(api_client.get(URL + "?is_secure=0", **headers)) == ["Open"]
    assert sorted(_names(api_client.get(URL + "?client=init", **headers))) == ["Open", "Secure"]


def test_numeric_flag_forms(api_client, headers):
    _asset(api_client, headers, name="Due", next_maintenance_date="2020-01-01")
    _asset(api_client, headers, name="Later", next_maintenance_date="2999-01-01")

    assert _names(api_client.get(URL + "?maintenance_due=1", **headers)) == ["Due"]
    assert sorted(_names(api_client.get(URL + "?maintenance_due=0", **headers))) == ["Due", "Later"]
    assert _names(api_client.get(URL + "?is_secure=1", **headers)) == []

    res = api_client.get(URL + "?is_secure=maybe", **headers)
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_search(api_client, headers):
    _asset(api_client, headers, name="db-primary", ip_address="10.0.0.5")
    _asset(api_client, headers, name="printer-2f")

    assert _names(api_client.get(URL + "?search=10.0.0", **headers)) == ["db-primary"]


def test_invalid_type_lists_allowed_values(api_client, headers):
    res = api_client.post(URL, {"name": "X", "client": "Y", "type": "Laptop"}, format="json", **headers)
    assert res.status_code == 400
    assert "Server, Workstation, Network, Printer" in str(res.json()["details"])


def test_create_then_get_round_trip(api_client, headers):
    created = _asset(api_client, headers, os="Windows 11", purchase_date="2025-03-01")
    res = api_client.get(f"{URL}{created['id']}/", **headers)
    assert res.status_code == 200
    body = res.json()
    assert body["os"] == "Windows 11"
    assert body["purchase_date"] == "2025-03-01"
    assert body["created_by"] is not None


def test_delete_is_soft_then_restore(api_client, headers):
    created = _asset(api_client, headers)

    assert api_client.delete(f"{URL}{created['id']}/", **headers).status_code == 204
    assert api_client.get(f"{URL}{created['id']}/", **headers).status_code == 404
    assert Asset.objects.get(id=created["id"]).is_deleted is True

    assert _names(api_client.get(URL, **headers)) == []
    assert _names(api_client.get(URL + "?include_deleted=true", **headers)) == ["WKS-01"]

    res = api_client.post(f"{URL}{created['id']}/restore/", {}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["is_deleted"] is False

    codes = set(AuditEvent.objects.filter(entity_id=created["id"]).values_list("event_code", flat=True))
    assert {"assets.asset.created", "assets.asset.deleted", "assets.asset.restored"} <= codes


def test_update_missing_asset_is_404(api_client, headers):
    res = api_client.patch(f"{URL}00000000-0000-0000-0000-000000000000/", {"name": "x"}, format="json", **headers)
    assert res.status_code == 404
    assert res.json()["code"] == "not_found"


def test_activity_is_newest_first_and_capped(api_client, headers):
    created = _asset(api_client, headers)
    for i in range(52):
        api_client.post(f"{URL}{created['id']}/activity/", {"activity": f"event {i}"}, format="json", **headers)

    logs = Asset.objects.get(id=created["id"]).activity_logs
    assert len(logs) == 50
    assert logs[0]["activity"].startswith("event 51")


def test_maintenance_record_updates_schedule(api_client, headers):
    created = _asset(api_client, headers)
    payload = {
        "maintenance_type": "preventive",
        "description": "Fan cleaning",
        "performed_by": "tech1",
        "performed_at": "2026-01-10T09:00:00Z",
        "next_due_date": "2026-07-10",
    }
    res = api_client.post(f"{URL}{created['id']}/maintenance/", payload, format="json", **headers)
    assert res.status_code == 201, res.content

    asset = api_client.get(f"{URL}{created['id']}/", **headers).json()
    assert asset["next_maintenance_date"] == "2026-07-10"
    assert asset["activity_logs"][0]["activity"] == "preventive maintenance completed: Fan cleaning by tech1"

    res = api_client.get(f"{URL}{created['id']}/maintenance/", **headers)
    assert len(res.json()) == 1


def test_maintenance_type_is_validated(api_client, headers):
    created = _asset(api_client, headers)
    payload = {"maintenance_type": "cosmetic", "description": "x", "performed_by": "t", "performed_at": "2026-01-10T09:00:00Z"}
    res = api_client.post(f"{URL}{created['id']}/maintenance/", payload, format="json", **headers)
    assert res.status_code == 400


def test_location_setting_usage_is_counted(api_client, headers):
    res = api_client.post(
        "/api/v1/settings/asset-settings/", {"kind": "location", "name": "Rack A"}, format="json", **headers
    )
    setting_id = res.json()["id"]

    created = _asset(api_client, headers, location="Rack A")
    assert SettingItem.objects.get(id=setting_id).in_use_count == 1

    res = api_client.delete(f"/api/v1/settings/asset-settings/{setting_id}/", **headers)
    assert res.status_code == 409

    api_client.delete(f"{URL}{created['id']}/", **headers)
    assert SettingItem.objects.get(id=setting_id).in_use_count == 0
    assert api_client.delete(f"/api/v1/settings/asset-settings/{setting_id}/", **headers).status_code == 204


def test_unknown_category_is_rejected_once_categories_exist(api_client, headers):
    api_client.post("/api/v1/settings/asset-settings/initialize/", {}, format="json", **headers)

    res = api_client.post(URL, {"name": "X", "client": "Y", "type": "Server", "category": "Spaceships"},
                          format="json", **headers)
    assert res.status_code == 400

    created = _asset(api_client, headers, category="servers")
    assert created["category"] == "Servers"


def test_stats(api_client, headers):
    _asset(api_client, headers, name="A", status="Online", is_secure=True, cpu_usage=40, ram_total=16, ram_used=8)
    _asset(api_client, headers, name="B", status="Warning", cpu_usage=60, ram_total=16, ram_used=16)

    res = api_client.get(URL + "stats/", **headers)
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    assert body["online"] == 1
    assert body["warning"] == 1
    assert body["secured"] == 1
    assert body["at_risk"] == 1
    assert body["avg_cpu_usage"] == 50
    assert body["avg_memory_usage"] == 75
    assert body["by_type"]["Workstation"] == 2


def test_assets_are_org_scoped(api_client, headers, organization, other_organization):
    _asset(api_client, headers)
    Asset.objects.create(org_id=other_organization.id, name="Foreign", client="Globex", type="Server")

    assert _names(api_client.get(URL, **headers)) == ["WKS-01"]


def test_readonly_member_can_list_but_not_create(readonly_client, headers):
    assert readonly_client.get(URL, **headers).status_code == 200
    res = readonly_client.post(URL, {"name": "X", "client": "Y", "type": "Server"}, format="json", **headers)
    assert res.status_code == 403
