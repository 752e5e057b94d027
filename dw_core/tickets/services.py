# backend/dw_core/tickets/services.py
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.custom_fields.services import validate_custom_values
from dw_core.settings_registry.selectors import canonical_name, default_setting_name, find_setting, list_settings
from dw_core.tickets.models import FALLBACK_PRIORITY, FALLBACK_QUEUE, FALLBACK_STATUS, Ticket

logger = logging.getLogger(__name__)

MODULE = "ticket"

# ticket field -> (settings kind, fallback when the org has none)
SETTING_FIELDS = {
    "status": ("status", FALLBACK_STATUS),
    "priority": ("priority", FALLBACK_PRIORITY),
    "queue": ("queue", FALLBACK_QUEUE),
}

CLOSED_STATUS_TYPE = "Closed"
FALLBACK_CLOSED_STATUSES = ("Resolved", "Closed")


def _activity_entry(activity: str, user: Optional[str]) -> dict:
    return {"timestamp": timezone.now().isoformat(), "user": user or "system", "activity": activity}


def _sla_for(*, org_id: UUID, priority: str, started_at) -> dict:
    setting = find_setting(org_id=org_id, module=MODULE, kind="priority", name=priority)
    meta = (setting.metadata or {}) if setting else {}

    response = meta.get("response_sla_minutes")
    resolution = meta.get("resolution_sla_minutes")
    if response is None and resolution is None:
        return {}

    sla = {"priority": setting.name}
    if response is not None:
        sla["response_sla_minutes"] = response
        sla["response_due_at"] = (started_at + timedelta(minutes=response)).isoformat()
    if resolution is not None:
        sla["resolution_sla_minutes"] = resolution
        sla["resolution_due_at"] = (started_at + timedelta(minutes=resolution)).isoformat()
    return sla


def closed_status_names(*, org_id: UUID) -> list[str]:
    """Statuses whose settings metadata marks them Closed; the fallback pair when none are configured."""
    rows = list_settings(org_id=org_id, module=MODULE, kind="status")
    if not rows.exists():
        return list(FALLBACK_CLOSED_STATUSES)
    return [s.name for s in rows if (s.metadata or {}).get("status_type") == CLOSED_STATUS_TYPE]


def _clean_ticket(*, org_id: UUID, data: dict, instance=None) -> dict:
    for field, (kind, _) in SETTING_FIELDS.items():
        if data.get(field):
            data[field] = canonical_name(org_id=org_id, module=MODULE, kind=kind, value=data[field], field=field)

    if instance is None or "custom_fields" in data:
        data["custom_fields"] = validate_custom_values(
            org_id=org_id,
            module="Tickets",
            values=data.get("custom_fields") or {},
            existing=getattr(instance, "custom_fields", None),
        )
    return data


TICKET_POLICY = EntityPolicy(
    entity_type="Ticket",
    event_prefix="tickets.ticket",
    writable_fields=frozenset(
        {
            "subject", "description", "client", "assignee",
            "priority", "status", "queue",
            "associated_assets", "custom_fields",
        }
    ),
    search_fields=("subject", "description", "client", "assignee"),
    usage_module=MODULE,
    clean=_clean_ticket,
    audit_fields=("subject", "status", "priority"),
)

ticket_repo = EntityRepository(Ticket, TICKET_POLICY)


class TicketService:
    @staticmethod
    def get(*, org_id: UUID, ticket_id) -> Ticket:
        return ticket_repo.get(org_id=org_id, entity_id=ticket_id)

    @staticmethod
    @transaction.atomic
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict, performed_by: Optional[str] = None) -> Ticket:
        data = dict(data)
        for field, (kind, fallback) in SETTING_FIELDS.items():
            if not data.get(field):
                data[field] = default_setting_name(org_id=org_id, module=MODULE, kind=kind) or fallback

        now = timezone.now()
        extra = {
            "sla": _sla_for(org_id=org_id, priority=data["priority"], started_at=now),
            "activity": [_activity_entry("Ticket created", performed_by)],
        }
        ticket = ticket_repo.create(org_id=org_id, actor_user_id=actor_user_id, data=data, extra=extra)
        logger.info("ticket created id=%s priority=%s queue=%s org=%s", ticket.id, ticket.priority, ticket.queue, org_id)
        return ticket

    @staticmethod
    @transaction.atomic
    def update(
        *,
        org_id: UUID,
        ticket_id,
        actor_user_id: int | None,
        data: dict,
        performed_by: Optional[str] = None,
    ) -> Ticket:
        obj = ticket_repo.get(org_id=org_id, entity_id=ticket_id, for_update=True)
        updates = _clean_ticket(
            org_id=org_id,
            data={k: v for k, v in data.items() if k in TICKET_POLICY.writable_fields},
            instance=obj,
        )

        entries = []
        if "priority" in updates and updates["priority"] != obj.priority:
            updates["sla"] = _sla_for(org_id=org_id, priority=updates["priority"], started_at=obj.created_at)
            entries.append(f"Priority changed from {obj.priority} to {updates['priority']}")

        if "status" in updates and updates["status"] != obj.status:
            entries.append(f"Status changed from {obj.status} to {updates['status']}")
            closed = updates["status"] in closed_status_names(org_id=org_id)
            updates["closed_at"] = (obj.closed_at or timezone.now()) if closed else None

        if entries:
            updates["activity"] = [_activity_entry(e, performed_by) for e in reversed(entries)] + list(obj.activity or [])

        return ticket_repo.apply(obj=obj, updates=updates, actor_user_id=actor_user_id)

    @staticmethod
    def delete(*, org_id: UUID, ticket_id, actor_user_id: int | None) -> bool:
        return ticket_repo.delete(org_id=org_id, entity_id=ticket_id, actor_user_id=actor_user_id)

    @staticmethod
    @transaction.atomic
    def add_activity(*, org_id: UUID, ticket_id, activity: str, user: Optional[str] = None) -> Ticket:
        activity = (activity or "").strip()
        if not activity:
            raise ValidationError({"activity": ["This field is required."]})

        obj = ticket_repo.get(org_id=org_id, entity_id=ticket_id, for_update=True)
        obj.activity = [_activity_entry(activity, user)] + list(obj.activity or [])
        obj.save(update_fields=["activity", "updated_at"])
        return obj

    @staticmethod
    def stats(*, org_id: UUID) -> dict:
        qs = ticket_repo.queryset(org_id=org_id).order_by()

        by_status = {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id"))}
        by_priority = {row["priority"]: row["n"] for row in qs.values("priority").annotate(n=Count("id"))}

        closed_names = set(closed_status_names(org_id=org_id))
        total = sum(by_status.values())
        closed = sum(n for name, n in by_status.items() if name in closed_names)
        return {
            "total": total,
            "open": total - closed,
            "by_status": by_status,
            "by_priority": by_priority,
        }
