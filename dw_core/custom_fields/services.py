# backend/dw_core/custom_fields/services.py
from __future__ import annotations

import logging
import re
from datetime import date
from numbers import Number
from typing import Any
from uuid import UUID

from django.db import transaction
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from dw_core.common.api.exceptions import ConflictError
from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.custom_fields.models import CustomField, CustomFieldType

logger = logging.getLogger(__name__)


def _slug_key(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", (name or "").lower()).strip("_")[:64]


def _clean_definition(*, org_id: UUID, data: dict, instance=None) -> dict:
    field_type = data.get("field_type", getattr(instance, "field_type", CustomFieldType.TEXT))

    if "options" in data or "field_type" in data:
        options = data.get("options", getattr(instance, "options", []) or [])
        options = [str(o).strip() for o in options if str(o).strip()]
        if field_type == CustomFieldType.DROPDOWN and not options:
            raise ValidationError({"options": ["Dropdown fields need at least one option."]})
        if field_type != CustomFieldType.DROPDOWN:
            options = []
        data["options"] = options

    if instance is None and not data.get("key"):
        data["key"] = _slug_key(data.get("name", ""))
    if "key" in data:
        data["key"] = _slug_key(data["key"])
        if not data["key"]:
            raise ValidationError({"key": ["Key must contain letters or digits."]})
    return data


CUSTOM_FIELD_POLICY = EntityPolicy(
    entity_type="CustomField",
    event_prefix="custom_fields.field",
    writable_fields=frozenset({"name", "key", "field_type", "required", "options", "sort_order"}),
    ordering=("module", "sort_order", "name"),
    clean=_clean_definition,
    audit_fields=("module", "key", "field_type"),
)

_repo = EntityRepository(CustomField, CUSTOM_FIELD_POLICY)


def _ensure_unique_key(*, org_id: UUID, module: str, key: str, exclude_id=None) -> None:
    qs = CustomField.objects.alive().filter(org_id=org_id, module=module, key=key)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ConflictError(f'A {module} custom field with key "{key}" already exists.')


class CustomFieldService:
    @staticmethod
    def list(*, org_id: UUID, module: str | None = None):
        qs = _repo.queryset(org_id=org_id)
        if module:
            qs = qs.filter(module=module)
        return qs

    @staticmethod
    def get(*, org_id: UUID, field_id) -> CustomField:
        return _repo.get(org_id=org_id, entity_id=field_id)

    @staticmethod
    @transaction.atomic
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict) -> CustomField:
        module = data["module"]
        cleaned = _clean_definition(org_id=org_id, data={k: v for k, v in data.items() if k != "module"})
        _ensure_unique_key(org_id=org_id, module=module, key=cleaned["key"])
        return _repo.create(org_id=org_id, actor_user_id=actor_user_id, data=cleaned, extra={"module": module})

    @staticmethod
    @transaction.atomic
    def update(*, org_id: UUID, field_id, actor_user_id: int | None, data: dict) -> CustomField:
        obj = _repo.get(org_id=org_id, entity_id=field_id, for_update=True)
        if "module" in data and data["module"] != obj.module:
            raise ValidationError({"module": ["Custom field module cannot be changed."]})

        updates = _clean_definition(
            org_id=org_id,
            data={k: v for k, v in data.items() if k in CUSTOM_FIELD_POLICY.writable_fields},
            instance=obj,
        )
        if "key" in updates and updates["key"] != obj.key:
            _ensure_unique_key(org_id=org_id, module=obj.module, key=updates["key"], exclude_id=obj.id)
        return _repo.apply(obj=obj, updates=updates, actor_user_id=actor_user_id)

    @staticmethod
    def delete(*, org_id: UUID, field_id, actor_user_id: int | None) -> bool:
        return _repo.delete(org_id=org_id, entity_id=field_id, actor_user_id=actor_user_id)


# -------------------------------------------------------------------
# Value validation (entity writes)
# -------------------------------------------------------------------

def _coerce(defn: CustomField, value: Any):
    t = defn.field_type
    if value is None or value == "":
        return None

    if t in (CustomFieldType.TEXT, CustomFieldType.TEXTAREA):
        if not isinstance(value, str):
            raise ValueError("Must be a string.")
        return value

    if t == CustomFieldType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, Number):
            raise ValueError("Must be a number.")
        return value

    if t == CustomFieldType.CHECKBOX:
        if not isinstance(value, bool):
            raise ValueError("Must be true or false.")
        return value

    if t == CustomFieldType.DATE:
        parsed = value if isinstance(value, date) else parse_date(str(value))
        if parsed is None:
            raise ValueError("Must be a date (YYYY-MM-DD).")
        return parsed.isoformat()

    if t == CustomFieldType.DROPDOWN:
        if value not in (defn.options or []):
            raise ValueError("Must be one of: " + ", ".join(defn.options or []) + ".")
        return value

    return value


def validate_custom_values(
    *,
    org_id: UUID,
    module: str,
    values,
    existing: dict | None = None,
) -> dict:
    """
    Validates an entity's custom_fields bag against the module's live definitions.

    - unknown keys are rejected
    - required fields must be present (after merging onto `existing`)
    - values are type-checked; dates are normalized to ISO strings

    Returns the merged bag to store.
    """
    if values is None:
        values = {}
    if not isinstance(values, dict):
        raise ValidationError({"custom_fields": ["Must be an object."]})

    defs = {d.key: d for d in CustomField.objects.alive().filter(org_id=org_id, module=module)}

    errors: dict[str, list[str]] = {}
    merged = dict(existing or {})

    for key, value in values.items():
        defn = defs.get(key)
        if defn is None:
            errors[key] = ["Unknown custom field."]
            continue
        try:
            merged[key] = _coerce(defn, value)
        except ValueError as e:
            errors[key] = [str(e)]

    for key, defn in defs.items():
        if defn.required and merged.get(key) in (None, ""):
            errors.setdefault(key, ["This field is required."])

    if errors:
        logger.warning("custom field validation failed org=%s module=%s keys=%s", org_id, module, sorted(errors))
        raise ValidationError({"custom_fields": errors})

    return merged
