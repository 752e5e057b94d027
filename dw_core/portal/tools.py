# backend/dw_core/portal/tools.py
"""
Search functions an external client-portal assistant calls as "tools".

Each tool is scoped to one organization and one client, does a plain
case-insensitive substring match, and returns at most TOOL_RESULT_LIMIT
compact dicts. The assistant itself (prompting, model calls) lives outside
this backend.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from django.db.models import Q

from dw_core.assets.services import asset_repo
from dw_core.change_requests.services import change_repo
from dw_core.common.api.exceptions import NotFoundError
from dw_core.tickets.services import ticket_repo

TOOL_RESULT_LIMIT = 5


def _matching(qs, *, client: str, query: str, fields: tuple[str, ...]):
    qs = qs.filter(client__iexact=client.strip())
    term = (query or "").strip()
    if term:
        cond = Q()
        for f in fields:
            cond |= Q(**{f"{f}__icontains": term})
        qs = qs.filter(cond)
    return qs[:TOOL_RESULT_LIMIT]


def search_tickets(*, org_id: UUID, client: str, query: str) -> list[dict]:
    qs = _matching(ticket_repo.queryset(org_id=org_id), client=client, query=query, fields=("subject", "status"))
    return [{"id": str(t.id), "subject": t.subject, "status": t.status} for t in qs]


def search_assets(*, org_id: UUID, client: str, query: str) -> list[dict]:
    qs = _matching(asset_repo.queryset(org_id=org_id), client=client, query=query, fields=("name", "type"))
    return [{"id": str(a.id), "name": a.name, "type": a.type, "status": a.status} for a in qs]


def search_change_requests(*, org_id: UUID, client: str, query: str) -> list[dict]:
    qs = _matching(change_repo.queryset(org_id=org_id), client=client, query=query, fields=("title", "status"))
    return [
        {
            "id": str(c.id),
            "title": c.title,
            "status": c.status,
            "planned_start_date": c.planned_start_date.isoformat() if c.planned_start_date else None,
        }
        for c in qs
    ]


@dataclass(frozen=True)
class PortalTool:
    name: str
    description: str
    run: Callable[..., list[dict]]


TOOLS: dict[str, PortalTool] = {
    t.name: t
    for t in (
        PortalTool(
            name="search_tickets",
            description="Searches the client's tickets by subject or status.",
            run=search_tickets,
        ),
        PortalTool(
            name="search_assets",
            description="Searches the client's assets by name or type.",
            run=search_assets,
        ),
        PortalTool(
            name="search_change_requests",
            description="Searches the client's change requests by title or status.",
            run=search_change_requests,
        ),
    )
}


def catalog() -> list[dict]:
    return [{"name": t.name, "description": t.description} for t in TOOLS.values()]


def run_tool(*, name: str, org_id: UUID, client: str, query: str) -> list[dict]:
    tool = TOOLS.get(name)
    if tool is None:
        raise NotFoundError(f'Unknown tool "{name}".')
    return tool.run(org_id=org_id, client=client, query=query)
