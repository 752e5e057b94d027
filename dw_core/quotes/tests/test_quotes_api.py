# backend/dw_core/quotes/tests/test_quotes_api.py
import pytest

from dw_core.audit.models import AuditEvent
from dw_core.quotes.models import Quote

pytestmark = pytest.mark.django_db

URL = "/api/v1/quotes/"


def _quote(api_client, headers, **overrides):
    payload = {
        "subject": "Managed services renewal",
        "client_name": "Acme Corp",
        "client_id": "client-1",
        "expiry_date": "2030-01-31",
        "line_items": [
            {"description": "Endpoint management", "quantity": 10, "unit_price": "12.50"},
            {"description": "Onboarding", "quantity": 1, "unit_price": "300.00"},
        ],
    }
    payload.update(overrides)
    res = api_client.post(URL, payload, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def test_create_computes_total_from_line_items(api_client, headers):
    created = _quote(api_client, headers)
    assert created["status"] == "Draft"
    assert created["total"] == "425.00"
    assert [li["amount"] for li in created["line_items"]] == ["125.00", "300.00"]


def test_line_item_edit_recomputes_total(api_client, headers):
    created = _quote(api_client, headers)
    res = api_client.patch(
        f"{URL}{created['id']}/",
        {"line_items": [{"description": "Firewall", "quantity": 2, "unit_price": "99.99"}]},
        format="json",
        **headers,
    )
    assert res.status_code == 200, res.content
    assert res.json()["total"] == "199.98"

    res = api_client.patch(f"{URL}{created['id']}/", {"subject": "Renewal 2030"}, format="json", **headers)
    assert res.json()["total"] == "199.98"


def test_negative_line_item_is_rejected(api_client, headers):
    res = api_client.post(
        URL,
        {"subject": "x", "client_name": "y", "line_items": [{"description": "z", "quantity": -1, "unit_price": "5"}]},
        format="json",
        **headers,
    )
    assert res.status_code == 400


def test_update_cannot_change_status(api_client, headers):
    created = _quote(api_client, headers)
    res = api_client.patch(f"{URL}{created['id']}/", {"status": "Accepted"}, format="json", **headers)
    assert res.status_code == 400
    assert Quote.objects.get(id=created["id"]).status == "Draft"


def test_set_status(api_client, headers):
    created = _quote(api_client, headers)
    url = f"{URL}{created['id']}/status/"

    res = api_client.post(url, {"status": "Sent"}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["status"] == "Sent"

    res = api_client.post(url, {"status": "Expired"}, format="json", **headers)
    assert res.status_code == 400
    assert "Draft, Sent, Accepted, Rejected" in str(res.json()["details"])

    assert AuditEvent.objects.filter(entity_id=created["id"], event_code="quotes.quote.status_changed").count() == 1


def test_filters(api_client, headers):
    _quote(api_client, headers, subject="A")
    b = _quote(api_client, headers, subject="B", client_name="Initech", client_id="client-2")
    api_client.post(f"{URL}{b['id']}/status/", {"status": "Sent"}, format="json", **headers)

    res = api_client.get(URL + "?status=Sent,Accepted", **headers)
    assert [q["subject"] for q in res.json()["results"]] == ["B"]

    res = api_client.get(URL + "?client_name=acme", **headers)
    assert [q["subject"] for q in res.json()["results"]] == ["A"]

    res = api_client.get(URL + "?client_id=client-2&status=Draft", **headers)
    assert res.json()["count"] == 0


def test_stats(api_client, headers):
    a = _quote(api_client, headers, line_items=[{"description": "a", "quantity": 1, "unit_price": "100"}])
    b = _quote(api_client, headers, line_items=[{"description": "b", "quantity": 1, "unit_price": "300"}])
    c = _quote(api_client, headers, line_items=[{"description": "c", "quantity": 1, "unit_price": "200"}])
    _quote(api_client, headers, line_items=[{"description": "d", "quantity": 1, "unit_price": "400"}])

    api_client.post(f"{URL}{a['id']}/status/", {"status": "Accepted"}, format="json", **headers)
    api_client.post(f"{URL}{b['id']}/status/", {"status": "Rejected"}, format="json", **headers)
    api_client.post(f"{URL}{c['id']}/status/", {"status": "Sent"}, format="json", **headers)

    body = api_client.get(URL + "stats/", **headers).json()
    assert body["total"] == 4
    assert (body["draft"], body["sent"], body["accepted"], body["rejected"]) == (1, 1, 1, 1)
    assert body["total_value"] == 1000.0
    assert body["accepted_value"] == 100.0
    assert body["avg_value"] == 250.0
    assert body["conversion_rate"] == 50.0


def test_stats_empty(api_client, headers):
    body = api_client.get(URL + "stats/", **headers).json()
    assert body["total"] == 0
    assert body["conversion_rate"] == 0.0


def test_readonly_member_cannot_set_status(api_client, readonly_client, headers):
    created = _quote(api_client, headers)
    res = readonly_client.post(f"{URL}{created['id']}/status/", {"status": "Sent"}, format="json", **headers)
    assert res.status_code == 403
