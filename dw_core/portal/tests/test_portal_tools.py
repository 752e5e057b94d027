# backend/dw_core/portal/tests/test_portal_tools.py
import pytest

from dw_core.portal.tools import TOOL_RESULT_LIMIT, search_assets, search_tickets

pytestmark = pytest.mark.django_db

URL = "/api/v1/portal/tools/"


def _ticket(api_client, headers, subject, client="Acme Corp"):
    res = api_client.post("/api/v1/tickets/", {"subject": subject, "client": client}, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def test_catalog_lists_tools(api_client, headers):
    res = api_client.get(URL, **headers)
    assert res.status_code == 200
    assert {t["name"] for t in res.json()} == {"search_tickets", "search_assets", "search_change_requests"}


def test_search_tickets_is_client_scoped_and_capped(api_client, headers, organization):
    for i in range(TOOL_RESULT_LIMIT + 2):
        _ticket(api_client, headers, f"VPN down #{i}")
    _ticket(api_client, headers, "VPN down elsewhere", client="Initech")
    _ticket(api_client, headers, "Printer offline")

    results = search_tickets(org_id=organization.id, client="acme corp", query="vpn")
    assert len(results) == TOOL_RESULT_LIMIT
    assert set(results[0]) == {"id", "subject", "status"}
    assert all(r["subject"].startswith("VPN down #") for r in results)


def test_search_assets_by_type(api_client, headers, organization):
    api_client.post("/api/v1/assets/", {"name": "SRV-01", "client": "Acme Corp", "type": "Server"}, format="json", **headers)
    api_client.post("/api/v1/assets/", {"name": "WKS-01", "client": "Acme Corp", "type": "Workstation"}, format="json", **headers)

    results = search_assets(org_id=organization.id, client="Acme Corp", query="server")
    assert [a["name"] for a in results] == ["SRV-01"]


def test_run_tool_endpoint(api_client, headers):
    _ticket(api_client, headers, "Email bouncing")

    res = api_client.post(URL + "search_tickets/", {"client": "Acme Corp", "query": "email"}, format="json", **headers)
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["tool"] == "search_tickets"
    assert [t["subject"] for t in body["results"]] == ["Email bouncing"]


def test_unknown_tool_is_404(api_client, headers):
    res = api_client.post(URL + "delete_everything/", {"client": "Acme Corp"}, format="json", **headers)
    assert res.status_code == 404
    assert res.json()["code"] == "not_found"


def test_readonly_member_can_run_tools(readonly_client, headers):
    res = readonly_client.post(URL + "search_assets/", {"client": "Acme Corp", "query": ""}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["results"] == []


def test_tools_require_org_header(api_client):
    res = api_client.get(URL)
    assert res.status_code == 400
