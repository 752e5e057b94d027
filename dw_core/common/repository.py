# backend/dw_core/common/repository.py
"""
Generic org-scoped, soft-delete-aware entity store.

Every module (assets, inventory, change requests, tickets, projects, quotes)
shares the same CRUD + audit shape; what differs is captured by an
EntityPolicy: which fields a client may write, which fields `search` looks at,
default ordering, a module-specific `clean` hook, and which settings module's
in-use counts depend on the entity.

Module services wrap a repository instance and add their own transitions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from django.db import models, transaction
from django.db.models import Q, QuerySet

from dw_core.audit.services import AuditService
from dw_core.common.api.exceptions import NotFoundError
from dw_core.common.events import SETTINGS_USAGE_CHANGED, publish

logger = logging.getLogger(__name__)

# clean(org_id=..., data=..., instance=None|obj) -> data
CleanHook = Callable[..., dict]


@dataclass(frozen=True)
class EntityPolicy:
    entity_type: str
    event_prefix: str
    writable_fields: frozenset[str]
    search_fields: tuple[str, ...] = ()
    ordering: tuple[str, ...] = ("-created_at",)
    usage_module: Optional[str] = None
    clean: Optional[CleanHook] = None
    audit_fields: tuple[str, ...] = field(default=())


def _as_uuid(value) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class EntityRepository:
    def __init__(self, model: type[models.Model], policy: EntityPolicy):
        self.model = model
        self.policy = policy

    # -------------------------
    # Read side
    # -------------------------
    def queryset(self, *, org_id: UUID, include_deleted: bool = False) -> QuerySet:
        qs = self.model.objects.filter(org_id=org_id)
        if not include_deleted:
            qs = qs.alive()
        return qs.order_by(*self.policy.ordering)

    def get(
        self,
        *,
        org_id: UUID,
        entity_id,
        include_deleted: bool = False,
        for_update: bool = False,
    ):
        pk = _as_uuid(entity_id)
        if pk is None:
            raise NotFoundError(f"{self.policy.entity_type} not found.")

        qs = self.model.objects.filter(org_id=org_id, id=pk)
        if not include_deleted:
            qs = qs.alive()
        if for_update:
            qs = qs.select_for_update()

        obj = qs.first()
        if obj is None:
            raise NotFoundError(f"{self.policy.entity_type} not found.")
        return obj

    def search(self, *, org_id: UUID, text: str, limit: int | None = None, queryset: QuerySet | None = None):
        qs = queryset if queryset is not None else self.queryset(org_id=org_id)

        term = (text or "").strip()
        if term and self.policy.search_fields:
            cond = Q()
            for f in self.policy.search_fields:
                cond |= Q(**{f"{f}__icontains": term})
            qs = qs.filter(cond)

        if limit is not None:
            return qs[:limit]
        return qs

    def live_ids(self, *, org_id: UUID, ids: Iterable[str]) -> list:
        wanted = [u for u in (_as_uuid(i) for i in ids or []) if u is not None]
        if not wanted:
            return []
        return list(self.queryset(org_id=org_id).filter(id__in=wanted))

    # -------------------------
    # Write side
    # -------------------------
    def _writable(self, data: dict | None) -> dict:
        allowed = self.policy.writable_fields
        return {k: v for k, v in (data or {}).items() if k in allowed}

    def _clean(self, *, org_id: UUID, data: dict, instance=None) -> dict:
        if self.policy.clean is None:
            return data
        return self.policy.clean(org_id=org_id, data=data, instance=instance)

    def _audit(self, *, action: str, obj, actor_user_id: int | None, metadata: dict | None = None) -> None:
        AuditService.log(
            event_code=f"{self.policy.event_prefix}.{action}",
            entity_type=self.policy.entity_type,
            entity_id=obj.id,
            org_id=obj.org_id,
            actor_user_id=actor_user_id,
            metadata=metadata or {},
        )

    def _usage_changed(self, org_id: UUID) -> None:
        if self.policy.usage_module:
            publish(SETTINGS_USAGE_CHANGED, {"org_id": str(org_id), "module": self.policy.usage_module})

    @transaction.atomic
    def create(self, *, org_id: UUID, actor_user_id: int | None, data: dict, extra: dict | None = None):
        values = self._clean(org_id=org_id, data=self._writable(data))
        values.update(extra or {})

        obj = self.model.objects.create(
            org_id=org_id,
            created_by_id=actor_user_id,
            updated_by_id=actor_user_id,
            **values,
        )

        meta = {f: _jsonable(getattr(obj, f, None)) for f in self.policy.audit_fields}
        self._audit(action="created", obj=obj, actor_user_id=actor_user_id, metadata=meta)
        self._usage_changed(org_id)
        logger.info("%s created id=%s org=%s", self.policy.entity_type, obj.id, org_id)
        return obj

    @transaction.atomic
    def update(self, *, org_id: UUID, entity_id, actor_user_id: int | None, data: dict):
        obj = self.get(org_id=org_id, entity_id=entity_id, for_update=True)
        updates = self._clean(org_id=org_id, data=self._writable(data), instance=obj)
        return self.apply(obj=obj, updates=updates, actor_user_id=actor_user_id)

    def apply(self, *, obj, updates: dict[str, Any], actor_user_id: int | None, action: str = "updated"):
        """
        Persist already-validated field changes on a locked row and write the audit entry.
        Services call this directly after their own transition guards.
        """
        for k, v in updates.items():
            setattr(obj, k, v)
        obj.updated_by_id = actor_user_id

        update_fields = sorted(set(updates.keys()) | {"updated_by", "updated_at"})
        obj.save(update_fields=update_fields)

        self._audit(
            action=action,
            obj=obj,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(updates.keys())},
        )
        self._usage_changed(obj.org_id)
        return obj

    @transaction.atomic
    def delete(self, *, org_id: UUID, entity_id, actor_user_id: int | None) -> bool:
        obj = self.get(org_id=org_id, entity_id=entity_id, for_update=True)
        obj.save(update_fields=obj.mark_deleted(actor_user_id=actor_user_id))

        self._audit(action="deleted", obj=obj, actor_user_id=actor_user_id)
        self._usage_changed(org_id)
        logger.info("%s soft-deleted id=%s org=%s", self.policy.entity_type, obj.id, org_id)
        return True

    @transaction.atomic
    def restore(self, *, org_id: UUID, entity_id, actor_user_id: int | None):
        obj = self.get(org_id=org_id, entity_id=entity_id, include_deleted=True, for_update=True)
        if not obj.is_deleted:
            return obj

        obj.save(update_fields=obj.mark_restored(actor_user_id=actor_user_id))

        self._audit(action="restored", obj=obj, actor_user_id=actor_user_id)
        self._usage_changed(org_id)
        return obj


def _jsonable(value):
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
