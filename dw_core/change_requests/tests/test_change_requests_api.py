# backend/dw_core/change_requests/tests/test_change_requests_api.py
from datetime import timedelta

import pytest
from django.utils import timezone

from dw_core.audit.models import AuditEvent
from dw_core.change_requests.models import ChangeApproval, ChangeRequest

pytestmark = pytest.mark.django_db

URL = "/api/v1/change-requests/"
SETTINGS_URL = "/api/v1/settings/change-management-settings/"


def _iso(days: float) -> str:
    return (timezone.now() + timedelta(days=days)).isoformat()


def _change(api_client, headers, **overrides):
    payload = {
        "title": "Upgrade core switch firmware",
        "description": "Apply vendor firmware 9.3",
        "client": "Acme Corp",
        "risk_level": "High",
        "impact": "Medium",
        "planned_start_date": _iso(2),
        "planned_end_date": _iso(2.1),
    }
    payload.update(overrides)
    res = api_client.post(URL, payload, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def test_create_starts_pending_and_stamps_submitter(api_client, headers):
    created = _change(api_client, headers)
    assert created["status"] == "Pending Approval"
    assert created["submitted_by"] == "testuser"
    assert created["risk_score"] == 0


def test_create_rejects_other_initial_status(api_client, headers):
    res = api_client.post(
        URL,
        {
            "title": "x", "description": "y", "client": "z", "risk_level": "Low", "impact": "Low",
            "planned_start_date": _iso(1), "planned_end_date": _iso(2), "status": "Approved",
        },
        format="json",
        **headers,
    )
    assert res.status_code == 400


def test_end_before_start_is_rejected(api_client, headers):
    res = api_client.post(
        URL,
        {
            "title": "x", "description": "y", "client": "z", "risk_level": "Low", "impact": "Low",
            "planned_start_date": _iso(2), "planned_end_date": _iso(1),
        },
        format="json",
        **headers,
    )
    assert res.status_code == 400
    assert "planned_end_date" in res.json()["details"]


def test_create_enriches_from_category_and_risk_settings(api_client, headers):
    api_client.post(SETTINGS_URL + "initialize/", {}, format="json", **headers)

    created = _change(api_client, headers, category="emergency", risk_level="Critical")
    assert created["category"] == "Emergency"
    assert created["risk_score"] == 100
    assert created["requires_testing"] is False
    assert created["requires_rollback_plan"] is True


def test_approve_only_from_pending(api_client, headers):
    created = _change(api_client, headers)
    url = f"{URL}{created['id']}/approve/"

    res = api_client.post(url, {"reason": "CAB ok"}, format="json", **headers)
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["status"] == "Approved"
    assert body["approved_by"] == "testuser"
    assert body["approved_at"] is not None

    res = api_client.post(url, {}, format="json", **headers)
    assert res.status_code == 409
    assert res.json()["code"] == "conflict"

    assert ChangeApproval.objects.filter(change_request_id=created["id"]).count() == 1
    assert AuditEvent.objects.filter(entity_id=created["id"], event_code="change_requests.change_request.approved").exists()


def test_reject_requires_reason(api_client, headers):
    created = _change(api_client, headers)
    url = f"{URL}{created['id']}/reject/"

    res = api_client.post(url, {"reason": "   "}, format="json", **headers)
    assert res.status_code == 400
    assert ChangeRequest.objects.get(id=created["id"]).status == "Pending Approval"

    res = api_client.post(url, {"reason": "No rollback plan", "rejected_by": "cab-chair"}, format="json", **headers)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "Rejected"
    assert body["rejection_reason"] == "No rollback plan"
    assert body["rejected_by"] == "cab-chair"

    res = api_client.post(f"{URL}{created['id']}/approve/", {}, format="json", **headers)
    assert res.status_code == 409

    approvals = api_client.get(f"{URL}{created['id']}/approvals/", **headers).json()
    assert [(a["decision"], a["approver"]) for a in approvals] == [("rejected", "cab-chair")]


def test_update_cannot_approve_directly(api_client, headers):
    created = _change(api_client, headers)
    res = api_client.patch(f"{URL}{created['id']}/", {"status": "Approved"}, format="json", **headers)
    assert res.status_code == 409


def test_lifecycle_stamps_actual_dates(api_client, headers):
    created = _change(api_client, headers)
    api_client.post(f"{URL}{created['id']}/approve/", {}, format="json", **headers)

    res = api_client.patch(f"{URL}{created['id']}/", {"status": "In Progress"}, format="json", **headers)
    assert res.status_code == 200
    assert res.json()["actual_start_date"] is not None

    res = api_client.patch(f"{URL}{created['id']}/", {"status": "Completed"}, format="json", **headers)
    assert res.json()["actual_end_date"] is not None

    res = api_client.patch(f"{URL}{created['id']}/", {"status": "Cancelled"}, format="json", **headers)
    assert res.status_code == 409


def test_upcoming_window(api_client, headers):
    soon = _change(api_client, headers, title="soon", planned_start_date=_iso(3), planned_end_date=_iso(4))
    later = _change(api_client, headers, title="later", planned_start_date=_iso(20), planned_end_date=_iso(21))
    _change(api_client, headers, title="pending", planned_start_date=_iso(1), planned_end_date=_iso(2))

    for c in (soon, later):
        api_client.post(f"{URL}{c['id']}/approve/", {}, format="json", **headers)

    res = api_client.get(URL + "upcoming/", **headers)
    assert [c["title"] for c in res.json()] == ["soon"]

    res = api_client.get(URL + "upcoming/?days=30", **headers)
    assert [c["title"] for c in res.json()] == ["soon", "later"]


def test_links_resolve_live_assets_and_tickets(api_client, headers):
    asset = api_client.post(
        "/api/v1/assets/", {"name": "SW-CORE", "client": "Acme Corp", "type": "Network"}, format="json", **headers
    ).json()
    gone = api_client.post(
        "/api/v1/assets/", {"name": "OLD", "client": "Acme Corp", "type": "Network"}, format="json", **headers
    ).json()
    api_client.delete(f"/api/v1/assets/{gone['id']}/", **headers)
    ticket = api_client.post("/api/v1/tickets/", {"subject": "Switch flapping", "client": "Acme Corp"},
                             format="json", **headers).json()

    created = _change(
        api_client, headers,
        associated_assets=[asset["id"], gone["id"]],
        associated_tickets=[ticket["id"]],
    )

    body = api_client.get(f"{URL}{created['id']}/links/", **headers).json()
    assert [a["name"] for a in body["assets"]] == ["SW-CORE"]
    assert [t["subject"] for t in body["tickets"]] == ["Switch flapping"]


def test_filters_and_stats(api_client, headers):
    a = _change(api_client, headers, title="A", risk_level="Low", impact="Low")
    _change(api_client, headers, title="B", risk_level="High", client="Initech")
    api_client.post(f"{URL}{a['id']}/approve/", {}, format="json", **headers)

    res = api_client.get(URL + "?risk_level=Low,Critical", **headers)
    assert [c["title"] for c in res.json()["results"]] == ["A"]

    res = api_client.get(URL + "?status=Pending%20Approval&client=initech", **headers)
    assert [c["title"] for c in res.json()["results"]] == ["B"]

    body = api_client.get(URL + "stats/", **headers).json()
    assert body["total"] == 2
    assert body["pending_approval"] == 1
    assert body["approved"] == 1
    assert body["by_risk_level"] == {"Low": 1, "High": 1}


def test_delete_is_soft_and_keeps_approvals(api_client, headers):
    created = _change(api_client, headers)
    api_client.post(f"{URL}{created['id']}/approve/", {}, format="json", **headers)

    assert api_client.delete(f"{URL}{created['id']}/", **headers).status_code == 204
    assert api_client.get(f"{URL}{created['id']}/", **headers).status_code == 404
    assert ChangeRequest.objects.get(id=created["id"]).is_deleted is True
    assert ChangeApproval.objects.filter(change_request_id=created["id"]).count() == 1


def test_category_in_use_cannot_be_deleted(api_client, headers):
    api_client.post(SETTINGS_URL + "initialize/", {}, format="json", **headers)
    res = api_client.post(SETTINGS_URL, {"type": "category", "name": "Facilities"}, format="json", **headers)
    setting_id = res.json()["id"]

    _change(api_client, headers, category="Facilities")
    assert api_client.delete(f"{SETTINGS_URL}{setting_id}/", **headers).status_code == 409


def test_readonly_member_cannot_approve(api_client, readonly_client, headers):
    created = _change(api_client, headers)
    res = readonly_client.post(f"{URL}{created['id']}/approve/", {}, format="json", **headers)
    assert res.status_code == 403
