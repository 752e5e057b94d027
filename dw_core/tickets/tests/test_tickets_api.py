# backend/dw_core/tickets/tests/test_tickets_api.py
import pytest

from dw_core.settings_registry.models import SettingItem
from dw_core.tickets.models import Ticket

pytestmark = pytest.mark.django_db

URL = "/api/v1/tickets/"
SETTINGS_URL = "/api/v1/settings/ticket-settings/"


def _ticket(api_client, headers, **overrides):
    payload = {"subject": "Printer jammed", "client": "Acme Corp"}
    payload.update(overrides)
    res = api_client.post(URL, payload, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def test_create_without_settings_uses_fallback_defaults(api_client, headers):
    created = _ticket(api_client, headers)
    assert (created["status"], created["priority"], created["queue"]) == ("Open", "Medium", "Unassigned")
    assert created["sla"] == {}
    assert created["activity"][0]["activity"] == "Ticket created"
    assert created["activity"][0]["user"] == "testuser"


def test_create_resolves_defaults_and_sla_from_settings(api_client, headers):
    api_client.post(SETTINGS_URL + "initialize/", {}, format="json", **headers)

    created = _ticket(api_client, headers)
    assert created["queue"] == "Tier 1 Support"
    assert created["priority"] == "Medium"
    assert created["sla"]["response_sla_minutes"] == 480
    assert created["sla"]["resolution_sla_minutes"] == 4320
    assert "resolution_due_at" in created["sla"]


def test_unknown_priority_is_rejected_once_settings_exist(api_client, headers):
    api_client.post(SETTINGS_URL + "initialize/", {}, format="json", **headers)

    res = api_client.post(URL, {"subject": "x", "client": "y", "priority": "Urgent"}, format="json", **headers)
    assert res.status_code == 400
    assert "Low, Medium, High, Critical" in str(res.json()["details"])

    created = _ticket(api_client, headers, priority="high")
    assert created["priority"] == "High"


def test_priority_change_recomputes_sla_and_logs_activity(api_client, headers):
    api_client.post(SETTINGS_URL + "initialize/", {}, format="json", **headers)
    created = _ticket(api_client, headers)

    res = api_client.patch(f"{URL}{created['id']}/", {"priority": "Critical"}, format="json", **headers)
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["sla"]["response_sla_minutes"] == 60
    assert body["activity"][0]["activity"] == "Priority changed from Medium to Critical"


def test_closing_stamps_closed_at_and_updates_stats(api_client, headers):
    api_client.post(SETTINGS_URL + "initialize/", {}, format="json", **headers)
    a = _ticket(api_client, headers, subject="A")
    _ticket(api_client, headers, subject="B", priority="High")

    res = api_client.patch(f"{URL}{a['id']}/", {"status": "Closed"}, format="json", **headers)
    assert res.json()["closed_at"] is not None

    res = api_client.patch(f"{URL}{a['id']}/", {"status": "Open"}, format="json", **headers)
    assert res.json()["closed_at"] is None

    api_client.patch(f"{URL}{a['id']}/", {"status": "Resolved"}, format="json", **headers)
    body = api_client.get(URL + "stats/", **headers).json()
    assert body["total"] == 2
    assert body["open"] == 1
    assert body["by_status"] == {"Resolved": 1, "Open": 1}
    assert body["by_priority"] == {"Medium": 1, "High": 1}


def test_filters(api_client, headers):
    _ticket(api_client, headers, subject="A", priority="High", assignee="sam")
    _ticket(api_client, headers, subject="B", priority="Low", client="Initech")

    res = api_client.get(URL + "?priority=High,Low&client=init", **headers)
    assert [t["subject"] for t in res.json()["results"]] == ["B"]

    res = api_client.get(URL + "?assignee=SAM", **headers)
    assert [t["subject"] for t in res.json()["results"]] == ["A"]


def test_required_custom_field_is_enforced(api_client, headers):
    api_client.post(
        "/api/v1/custom-fields/",
        {"module": "Tickets", "name": "Channel", "field_type": "Dropdown", "options": ["Email", "Phone"], "required": True},
        format="json",
        **headers,
    )

    res = api_client.post(URL, {"subject": "x", "client": "y"}, format="json", **headers)
    assert res.status_code == 400

    created = _ticket(api_client, headers, custom_fields={"channel": "Phone"})
    assert created["custom_fields"] == {"channel": "Phone"}


def test_activity_is_prepended(api_client, headers):
    created = _ticket(api_client, headers)
    res = api_client.post(f"{URL}{created['id']}/activity/", {"activity": "Called client"}, format="json", **headers)
    assert res.status_code == 201
    assert [e["activity"] for e in res.json()["activity"]] == ["Called client", "Ticket created"]


def test_queue_usage_blocks_setting_delete(api_client, headers):
    res = api_client.post(SETTINGS_URL, {"type": "queue", "name": "Escalations"}, format="json", **headers)
    setting_id = res.json()["id"]

    created = _ticket(api_client, headers, queue="Escalations")
    assert SettingItem.objects.get(id=setting_id).in_use_count == 1
    assert api_client.delete(f"{SETTINGS_URL}{setting_id}/", **headers).status_code == 409

    assert api_client.delete(f"{URL}{created['id']}/", **headers).status_code == 204
    assert Ticket.objects.get(id=created["id"]).is_deleted is True
    assert api_client.delete(f"{SETTINGS_URL}{setting_id}/", **headers).status_code == 204


def test_asset_ticket_association(api_client, headers):
    ticket = _ticket(api_client, headers)
    asset = api_client.post(
        "/api/v1/assets/", {"name": "WKS-01", "client": "Acme Corp", "type": "Workstation"}, format="json", **headers
    ).json()

    res = api_client.post(f"/api/v1/assets/{asset['id']}/tickets/", {"ticket_id": ticket["id"]}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["associated_tickets"] == [ticket["id"]]

    res = api_client.delete(f"/api/v1/assets/{asset['id']}/tickets/?ticket_id={ticket['id']}", **headers)
    assert res.json()["associated_tickets"] == []
