# backend/dw_core/settings_registry/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from dw_core.common.api.exceptions import NotFoundError
from dw_core.common.api.fields import allowed_values_message
from dw_core.settings_registry.models import SettingItem


def list_settings(
    *,
    org_id: UUID,
    module: str,
    kind: Optional[str] = None,
    include_inactive: bool = True,
) -> QuerySet:
    qs = SettingItem.objects.alive().filter(org_id=org_id, module=module)
    if kind:
        qs = qs.filter(kind=kind)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("kind", "sort_order", "name")


def get_setting(*, org_id: UUID, module: str, setting_id, kind: Optional[str] = None) -> SettingItem:
    try:
        pk = UUID(str(setting_id))
    except (TypeError, ValueError):
        raise NotFoundError("Setting not found.")

    qs = SettingItem.objects.alive().filter(org_id=org_id, module=module, id=pk)
    if kind:
        qs = qs.filter(kind=kind)
    obj = qs.first()
    if obj is None:
        raise NotFoundError("Setting not found.")
    return obj


def find_setting(*, org_id: UUID, module: str, kind: str, name: str) -> Optional[SettingItem]:
    """Live, active setting by name (case-insensitive)."""
    if not name:
        return None
    return (
        SettingItem.objects.alive()
        .filter(org_id=org_id, module=module, kind=kind, is_active=True, name__iexact=str(name).strip())
        .first()
    )


def allowed_names(*, org_id: UUID, module: str, kind: str) -> list[str]:
    return list(
        list_settings(org_id=org_id, module=module, kind=kind, include_inactive=False).values_list("name", flat=True)
    )


def default_setting_name(*, org_id: UUID, module: str, kind: str) -> Optional[str]:
    """
    The `is_default` active setting of a kind, else the first active one by sort order.
    None when the organization has no active settings of that kind.
    """
    qs = list_settings(org_id=org_id, module=module, kind=kind, include_inactive=False)
    chosen = qs.filter(is_default=True).first() or qs.first()
    return chosen.name if chosen else None


def canonical_name(*, org_id: UUID, module: str, kind: str, value: str, field: str) -> str:
    """
    Validates `value` against the organization's active settings of a kind and
    returns the stored spelling. Any value passes while the kind has no settings.
    """
    names = allowed_names(org_id=org_id, module=module, kind=kind)
    if not names:
        return value

    wanted = str(value).strip().lower()
    match = next((n for n in names if n.lower() == wanted), None)
    if match is None:
        raise ValidationError({field: [f'Invalid value "{value}". ' + allowed_values_message(names)]})
    return match
