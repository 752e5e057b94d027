# backend/dw_core/audit/tests/test_audit_api.py
import pytest

pytestmark = pytest.mark.django_db

URL = "/api/v1/audit/events/"


def test_entity_writes_are_audited_and_filterable(api_client, headers, user):
    t = api_client.post("/api/v1/tickets/", {"subject": "x", "client": "y"}, format="json", **headers).json()
    api_client.patch(f"/api/v1/tickets/{t['id']}/", {"assignee": "sam"}, format="json", **headers)
    api_client.post("/api/v1/assets/", {"name": "a", "client": "y", "type": "Server"}, format="json", **headers)

    res = api_client.get(URL + f"?entity_id={t['id']}", **headers)
    assert res.status_code == 200
    assert {e["event_code"] for e in res.json()} == {"tickets.ticket.created", "tickets.ticket.updated"}

    res = api_client.get(URL + "?entity_type=Asset", **headers)
    assert [e["event_code"] for e in res.json()] == ["assets.asset.created"]
    assert res.json()[0]["actor_user_id"] == user.id

    res = api_client.get(URL + "?limit=1", **headers)
    assert len(res.json()) == 1


def test_events_are_org_scoped(api_client, headers, other_organization):
    from dw_core.audit.services import AuditService

    AuditService.log(
        event_code="tickets.ticket.created",
        entity_type="Ticket",
        entity_id=other_organization.id,
        org_id=other_organization.id,
        actor_user_id=None,
    )
    assert api_client.get(URL, **headers).json() == []


def test_invalid_entity_id(api_client, headers):
    res = api_client.get(URL + "?entity_id=abc", **headers)
    assert res.status_code == 400


def test_readonly_cannot_read_audit(readonly_client, headers):
    assert readonly_client.get(URL, **headers).status_code == 403
