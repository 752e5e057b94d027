# backend/dw_core/settings_registry/services.py
from __future__ import annotations

import logging
from numbers import Number
from typing import Any, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Sum
from rest_framework.exceptions import ValidationError

from dw_core.common.api.exceptions import ConflictError
from dw_core.common.api.fields import allowed_values_message
from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.settings_registry.defaults import default_settings_for
from dw_core.settings_registry.models import MODULE_KINDS, SettingItem
from dw_core.settings_registry.selectors import get_setting, list_settings
from dw_core.settings_registry.usage import count_usage, has_usage_counter

logger = logging.getLogger(__name__)


SETTING_POLICY = EntityPolicy(
    entity_type="SettingItem",
    event_prefix="settings.item",
    writable_fields=frozenset(
        {"name", "color", "description", "sort_order", "is_default", "is_active", "metadata"}
    ),
    ordering=("kind", "sort_order", "name"),
    audit_fields=("module", "kind", "name"),
)

_repo = EntityRepository(SettingItem, SETTING_POLICY)


# -------------------------
# metadata rules per (module, kind)
# -------------------------
def _number(lo: float, hi: Optional[float] = None):
    def check(value) -> bool:
        if isinstance(value, bool) or not isinstance(value, Number):
            return False
        return value >= lo and (hi is None or value <= hi)
    return check


def _integer(lo: int, hi: Optional[int] = None):
    def check(value) -> bool:
        return isinstance(value, int) and _number(lo, hi)(value)
    return check


def _boolean(value) -> bool:
    return isinstance(value, bool)


def _one_of(*choices: str):
    def check(value) -> bool:
        return value in choices
    return check


METADATA_RULES: dict[tuple[str, str], dict[str, Any]] = {
    ("asset", "category"): {
        "depreciation_rate": _number(0, 100),
        "default_warranty_months": _integer(0),
    },
    ("change_management", "category"): {
        "requires_approval": _boolean,
        "requires_testing": _boolean,
        "requires_rollback_plan": _boolean,
    },
    ("change_management", "risk"): {
        "required_approvers": _integer(1, 10),
    },
    ("ticket", "priority"): {
        "level": _integer(1),
        "response_sla_minutes": _integer(0),
        "resolution_sla_minutes": _integer(0),
    },
    ("ticket", "status"): {
        "status_type": _one_of("Open", "Pending", "Closed"),
    },
}


def _validate_metadata(module: str, kind: str, metadata) -> dict:
    if metadata is None:
        return {}
    if not isinstance(metadata, dict):
        raise ValidationError({"metadata": ["Must be an object."]})

    rules = METADATA_RULES.get((module, kind), {})
    errors = {}
    for key, check in rules.items():
        if key in metadata and metadata[key] is not None and not check(metadata[key]):
            errors[key] = [f"Invalid value for {key}."]
    if errors:
        raise ValidationError({"metadata": errors})
    return metadata


def _validate_kind(module: str, kind: Optional[str]) -> str:
    allowed = [str(k) for k in MODULE_KINDS.get(module, ())]
    if kind not in allowed:
        raise ValidationError({"kind": [f'Invalid value "{kind}". ' + allowed_values_message(allowed)]})
    return kind


def _ensure_unique_name(*, org_id: UUID, module: str, kind: str, name: str, exclude_id=None) -> None:
    qs = SettingItem.objects.alive().filter(org_id=org_id, module=module, kind=kind, name__iexact=name)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        logger.warning("setting duplicate rejected org=%s module=%s kind=%s name=%r", org_id, module, kind, name)
        raise ConflictError(f'A {kind} named "{name}" already exists.')


def _clear_other_defaults(obj: SettingItem) -> None:
    (
        SettingItem.objects.alive()
        .filter(org_id=obj.org_id, module=obj.module, kind=obj.kind, is_default=True)
        .exclude(id=obj.id)
        .update(is_default=False)
    )


def _live_usage(obj: SettingItem) -> int:
    if not has_usage_counter(obj.module, obj.kind):
        return obj.in_use_count
    return count_usage(org_id=obj.org_id, module=obj.module, kind=obj.kind, name=obj.name)


class SettingsRegistryService:
    """
    Per-module settings registry: org-scoped, soft-deleted, names unique
    (case-insensitive) per (organization, module, kind) among live rows.
    """

    @staticmethod
    def list(*, org_id: UUID, module: str, kind: Optional[str] = None, include_inactive: bool = True):
        if kind:
            _validate_kind(module, kind)
        return list_settings(org_id=org_id, module=module, kind=kind, include_inactive=include_inactive)

    @staticmethod
    def get(*, org_id: UUID, module: str, setting_id, kind: Optional[str] = None) -> SettingItem:
        if kind:
            _validate_kind(module, kind)
        return get_setting(org_id=org_id, module=module, setting_id=setting_id, kind=kind)

    @staticmethod
    @transaction.atomic
    def create(*, org_id: UUID, module: str, actor_user_id: int | None, data: dict) -> SettingItem:
        kind = _validate_kind(module, data.get("kind"))
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError({"name": ["This field is required."]})

        _ensure_unique_name(org_id=org_id, module=module, kind=kind, name=name)

        payload = dict(data)
        payload["name"] = name
        payload["metadata"] = _validate_metadata(module, kind, payload.get("metadata"))

        obj = _repo.create(
            org_id=org_id,
            actor_user_id=actor_user_id,
            data=payload,
            extra={"module": module, "kind": kind},
        )
        if obj.is_default:
            _clear_other_defaults(obj)

        count = _live_usage(obj)
        if count != obj.in_use_count:
            SettingItem.objects.filter(id=obj.id).update(in_use_count=count)
            obj.in_use_count = count
        return obj

    @staticmethod
    @transaction.atomic
    def update(
        *,
        org_id: UUID,
        module: str,
        setting_id,
        actor_user_id: int | None,
        data: dict,
        kind: Optional[str] = None,
    ) -> SettingItem:
        obj = SettingsRegistryService.get(org_id=org_id, module=module, setting_id=setting_id, kind=kind)

        if "kind" in data and data["kind"] != obj.kind:
            raise ValidationError({"kind": ["Setting kind cannot be changed."]})

        updates = {k: v for k, v in data.items() if k in SETTING_POLICY.writable_fields}

        if "name" in updates:
            name = (updates["name"] or "").strip()
            if not name:
                raise ValidationError({"name": ["This field may not be blank."]})
            if name != obj.name:
                in_use = _live_usage(obj)
                if in_use > 0:
                    logger.warning("in-use setting rename rejected id=%s org=%s count=%s", obj.id, org_id, in_use)
                    raise ConflictError(f'Cannot rename "{obj.name}": it is used by {in_use} record(s).')
            if name.lower() != obj.name.lower():
                _ensure_unique_name(org_id=org_id, module=module, kind=obj.kind, name=name, exclude_id=obj.id)
            updates["name"] = name

        if "metadata" in updates:
            updates["metadata"] = _validate_metadata(module, obj.kind, updates["metadata"])

        obj = _repo.apply(obj=obj, updates=updates, actor_user_id=actor_user_id)
        if updates.get("is_default"):
            _clear_other_defaults(obj)

        if "name" in updates:
            count = _live_usage(obj)
            if count != obj.in_use_count:
                SettingItem.objects.filter(id=obj.id).update(in_use_count=count)
                obj.in_use_count = count
        return obj

    @staticmethod
    @transaction.atomic
    def delete(
        *,
        org_id: UUID,
        module: str,
        setting_id,
        actor_user_id: int | None,
        kind: Optional[str] = None,
    ) -> bool:
        obj = SettingsRegistryService.get(org_id=org_id, module=module, setting_id=setting_id, kind=kind)

        if obj.is_system:
            logger.warning("system setting delete rejected id=%s org=%s", obj.id, org_id)
            raise ConflictError("System settings cannot be deleted.")

        in_use = _live_usage(obj)
        if in_use != obj.in_use_count:
            SettingItem.objects.filter(id=obj.id).update(in_use_count=in_use)
        if in_use > 0:
            logger.warning("in-use setting delete rejected id=%s org=%s count=%s", obj.id, org_id, in_use)
            raise ConflictError(f'Cannot delete "{obj.name}": it is used by {in_use} record(s).')

        return _repo.delete(org_id=org_id, entity_id=obj.id, actor_user_id=actor_user_id)

    @staticmethod
    @transaction.atomic
    def initialize(*, org_id: UUID, module: str, actor_user_id: int | None) -> list[SettingItem]:
        """Seed the module's default set. Names already present are skipped."""
        existing = {
            (kind, name.lower())
            for kind, name in SettingItem.objects.alive()
            .filter(org_id=org_id, module=module)
            .values_list("kind", "name")
        }
        has_default = set(
            SettingItem.objects.alive()
            .filter(org_id=org_id, module=module, is_default=True)
            .values_list("kind", flat=True)
        )

        created = []
        for row in default_settings_for(module):
            if (row["kind"], row["name"].lower()) in existing:
                continue
            if row["is_default"] and row["kind"] in has_default:
                row["is_default"] = False

            obj = _repo.create(
                org_id=org_id,
                actor_user_id=actor_user_id,
                data=row,
                extra={"module": module, "kind": row["kind"], "is_system": row["is_system"]},
            )
            created.append(obj)

        if created:
            SettingsRegistryService.refresh_usage_counts(org_id=org_id, module=module)
            for obj in created:
                obj.refresh_from_db(fields=["in_use_count"])

        logger.info("settings initialized org=%s module=%s created=%s", org_id, module, len(created))
        return created

    @staticmethod
    def stats(*, org_id: UUID, module: str) -> dict:
        qs = list_settings(org_id=org_id, module=module)
        by_kind = {str(k): 0 for k in MODULE_KINDS.get(module, ())}
        for row in qs.order_by().values("kind").annotate(n=Count("id")):
            by_kind[row["kind"]] = row["n"]

        return {
            "total": qs.count(),
            "active": qs.filter(is_active=True).count(),
            "in_use": qs.filter(in_use_count__gt=0).count(),
            "total_usage": qs.aggregate(s=Sum("in_use_count"))["s"] or 0,
            "by_kind": by_kind,
        }

    @staticmethod
    def refresh_usage_counts(*, org_id: UUID, module: str) -> int:
        """Recompute in_use_count for every live setting of the module. Returns rows changed."""
        changed = 0
        for obj in list_settings(org_id=org_id, module=module):
            if not has_usage_counter(module, obj.kind):
                continue
            count = count_usage(org_id=org_id, module=module, kind=obj.kind, name=obj.name)
            if count != obj.in_use_count:
                SettingItem.objects.filter(id=obj.id).update(in_use_count=count)
                changed += 1
        return changed
