# backend/dw_core/projects/tests/test_projects_api.py
from datetime import timedelta

import pytest
from django.utils import timezone

from dw_core.audit.models import AuditEvent
from dw_core.projects.models import Project

pytestmark = pytest.mark.django_db

URL = "/api/v1/projects/"


def _day(offset: int) -> str:
    return (timezone.localdate() + timedelta(days=offset)).isoformat()


def _project(api_client, headers, **overrides):
    payload = {
        "name": "Office 365 migration",
        "client": "Acme Corp",
        "start_date": _day(5),
        "end_date": _day(40),
        "budget_total": "10000.00",
    }
    payload.update(overrides)
    res = api_client.post(URL, payload, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def test_create_defaults_to_not_started(api_client, headers):
    created = _project(api_client, headers)
    assert created["status"] == "Not Started"
    assert created["progress"] == 0
    assert created["actual_start_date"] is None


def test_end_before_start_is_rejected(api_client, headers):
    res = api_client.post(
        URL,
        {"name": "x", "client": "y", "start_date": _day(5), "end_date": _day(1)},
        format="json",
        **headers,
    )
    assert res.status_code == 400
    assert "end_date" in res.json()["details"]

    created = _project(api_client, headers)
    res = api_client.patch(f"{URL}{created['id']}/", {"end_date": _day(1)}, format="json", **headers)
    assert res.status_code == 400


def test_progress_is_bounded(api_client, headers):
    created = _project(api_client, headers)
    res = api_client.patch(f"{URL}{created['id']}/", {"progress": 120}, format="json", **headers)
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_status_transitions_stamp_actual_dates(api_client, headers):
    created = _project(api_client, headers)
    url = f"{URL}{created['id']}/"

    res = api_client.patch(url, {"status": "In Progress", "progress": 40}, format="json", **headers)
    assert res.status_code == 200, res.content
    started = res.json()["actual_start_date"]
    assert started is not None

    api_client.patch(url, {"status": "On Hold"}, format="json", **headers)
    res = api_client.patch(url, {"status": "In Progress"}, format="json", **headers)
    assert res.json()["actual_start_date"] == started

    res = api_client.patch(url, {"status": "Completed"}, format="json", **headers)
    body = res.json()
    assert body["progress"] == 100
    assert body["actual_end_date"] is not None

    assert AuditEvent.objects.filter(entity_id=created["id"], event_code="projects.project.status_changed").count() == 4


def test_upcoming_window(api_client, headers):
    _project(api_client, headers, name="soon", start_date=_day(3), end_date=_day(10))
    _project(api_client, headers, name="later", start_date=_day(60), end_date=_day(90))
    _project(api_client, headers, name="past", start_date=_day(-3), end_date=_day(10))
    held = _project(api_client, headers, name="held", start_date=_day(4), end_date=_day(10))
    api_client.patch(f"{URL}{held['id']}/", {"status": "On Hold"}, format="json", **headers)

    res = api_client.get(URL + "upcoming/", **headers)
    assert [p["name"] for p in res.json()] == ["soon"]

    res = api_client.get(URL + "upcoming/?days=90", **headers)
    assert [p["name"] for p in res.json()] == ["soon", "later"]


def test_filters(api_client, headers):
    _project(api_client, headers, name="A", team_members=["Sam", "Lee"], tags=["m365"])
    _project(api_client, headers, name="B", client="Initech", team_members=["Lee"], start_date=_day(20))

    res = api_client.get(URL + "?team_member=sam", **headers)
    assert [p["name"] for p in res.json()["results"]] == ["A"]

    res = api_client.get(URL + "?tag=M365", **headers)
    assert [p["name"] for p in res.json()["results"]] == ["A"]

    res = api_client.get(URL + f"?team_member=lee&start_date={_day(10)}", **headers)
    assert [p["name"] for p in res.json()["results"]] == ["B"]

    res = api_client.get(URL + "?status=Not%20Started,On%20Hold&client=init", **headers)
    assert [p["name"] for p in res.json()["results"]] == ["B"]


def test_stats(api_client, headers):
    a = _project(api_client, headers, name="A", budget_total="1000.00", budget_used="250.00")
    _project(api_client, headers, name="B", budget_total="3000.00")
    api_client.patch(f"{URL}{a['id']}/", {"status": "Completed"}, format="json", **headers)

    body = api_client.get(URL + "stats/", **headers).json()
    assert body["total"] == 2
    assert body["not_started"] == 1
    assert body["completed"] == 1
    assert body["total_budget"] == 4000.0
    assert body["used_budget"] == 250.0
    assert body["average_progress"] == 50


def test_delete_is_soft(api_client, headers):
    created = _project(api_client, headers)
    assert api_client.delete(f"{URL}{created['id']}/", **headers).status_code == 204
    assert api_client.get(f"{URL}{created['id']}/", **headers).status_code == 404
    assert Project.objects.get(id=created["id"]).is_deleted is True

    res = api_client.get(URL + "?include_deleted=true", **headers)
    assert res.json()["count"] == 1


def test_readonly_member_cannot_create(readonly_client, headers):
    res = readonly_client.post(
        URL, {"name": "x", "client": "y", "start_date": _day(1), "end_date": _day(2)}, format="json", **headers
    )
    assert res.status_code == 403


def test_other_org_cannot_see_project(api_client, headers, other_organization, user):
    created = _project(api_client, headers)
    res = api_client.get(f"{URL}{created['id']}/", HTTP_X_ORG_ID=str(other_organization.id))
    assert res.status_code in (403, 404)
