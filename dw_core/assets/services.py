# backend/dw_core/assets/services.py
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from django.apps import apps
from django.db import transaction
from django.db.models import Avg, Case, Count, F, FloatField, Q, Value, When
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from dw_core.assets.models import Asset, AssetMaintenanceRecord, AssetStatus, AssetType
from dw_core.common.api.exceptions import NotFoundError
from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.custom_fields.services import validate_custom_values
from dw_core.settings_registry.selectors import canonical_name, find_setting

logger = logging.getLogger(__name__)

ACTIVITY_LOG_LIMIT = 50

# asset type -> default asset category setting
TYPE_CATEGORY = {
    AssetType.SERVER: "Servers",
    AssetType.WORKSTATION: "Workstations",
    AssetType.NETWORK: "Network Equipment",
    AssetType.PRINTER: "Peripherals",
}


def _clean_asset(*, org_id: UUID, data: dict, instance=None) -> dict:
    if data.get("category"):
        data["category"] = canonical_name(
            org_id=org_id, module="asset", kind="category", value=data["category"], field="category"
        )

    if "custom_fields" in data:
        data["custom_fields"] = validate_custom_values(
            org_id=org_id,
            module="Assets",
            values=data["custom_fields"],
            existing=getattr(instance, "custom_fields", None),
        )
    return data


ASSET_POLICY = EntityPolicy(
    entity_type="Asset",
    event_prefix="assets.asset",
    writable_fields=frozenset(
        {
            "name", "client", "type", "status", "category", "location",
            "is_secure", "last_seen", "ip_address", "mac_address", "os",
            "cpu_model", "cpu_usage", "ram_total", "ram_used", "disk_total", "disk_used",
            "notes", "specifications", "associated_tickets",
            "sku", "purchase_date", "warranty_expiration",
            "maintenance_schedule", "next_maintenance_date",
            "depreciation", "custom_fields",
        }
    ),
    search_fields=("name", "client", "ip_address", "mac_address", "os", "cpu_model"),
    usage_module="asset",
    clean=_clean_asset,
    audit_fields=("name", "type", "client"),
)

asset_repo = EntityRepository(Asset, ASSET_POLICY)


def depreciation_block(*, org_id: UUID, category: str, purchase_cost, purchase_date=None) -> dict:
    """
    Straight-line depreciation from the asset Category setting's rate.
    Empty when the category has no rate configured.
    """
    setting = find_setting(org_id=org_id, module="asset", kind="category", name=category)
    rate = (setting.metadata or {}).get("depreciation_rate") if setting else None
    if not rate:
        return {}

    cost = float(purchase_cost or 0)
    rate = float(rate)
    return {
        "category": setting.name,
        "rate": rate,
        "method": "straight_line",
        "purchase_cost": cost,
        "purchase_date": purchase_date.isoformat() if hasattr(purchase_date, "isoformat") else purchase_date,
        "useful_life_years": round(100 / rate, 2),
        "annual_depreciation": round(cost * rate / 100, 2),
    }


def _usage_pct(used: str, total: str):
    return Case(
        When(**{f"{total}__gt": 0}, then=F(used) * 100.0 / F(total)),
        default=Value(0.0),
        output_field=FloatField(),
    )


def _activity_entry(activity: str, performed_by: Optional[str] = None) -> dict:
    return {
        "timestamp": timezone.now().isoformat(),
        "activity": f"{activity} by {performed_by}" if performed_by else activity,
    }


def _prepend_activity(obj: Asset, activity: str, performed_by: Optional[str] = None) -> None:
    obj.activity_logs = ([_activity_entry(activity, performed_by)] + list(obj.activity_logs or []))[:ACTIVITY_LOG_LIMIT]


class AssetService:
    @staticmethod
    def get(*, org_id: UUID, asset_id, include_deleted: bool = False) -> Asset:
        return asset_repo.get(org_id=org_id, entity_id=asset_id, include_deleted=include_deleted)

    @staticmethod
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict) -> Asset:
        return asset_repo.create(org_id=org_id, actor_user_id=actor_user_id, data=data)

    @staticmethod
    def update(*, org_id: UUID, asset_id, actor_user_id: int | None, data: dict) -> Asset:
        return asset_repo.update(org_id=org_id, entity_id=asset_id, actor_user_id=actor_user_id, data=data)

    @staticmethod
    def delete(*, org_id: UUID, asset_id, actor_user_id: int | None) -> bool:
        return asset_repo.delete(org_id=org_id, entity_id=asset_id, actor_user_id=actor_user_id)

    @staticmethod
    def restore(*, org_id: UUID, asset_id, actor_user_id: int | None) -> Asset:
        return asset_repo.restore(org_id=org_id, entity_id=asset_id, actor_user_id=actor_user_id)

    # -------------------------
    # Activity + ticket links
    # -------------------------
    @staticmethod
    @transaction.atomic
    def add_activity(*, org_id: UUID, asset_id, activity: str, performed_by: Optional[str] = None) -> Asset:
        activity = (activity or "").strip()
        if not activity:
            raise ValidationError({"activity": ["This field is required."]})

        obj = asset_repo.get(org_id=org_id, entity_id=asset_id, for_update=True)
        _prepend_activity(obj, activity, performed_by)
        obj.save(update_fields=["activity_logs", "updated_at"])
        return obj

    @staticmethod
    @transaction.atomic
    def associate_ticket(*, org_id: UUID, asset_id, ticket_id, actor_user_id: int | None) -> Asset:
        Ticket = apps.get_model("tickets", "Ticket")

        obj = asset_repo.get(org_id=org_id, entity_id=asset_id, for_update=True)
        ticket_id = str(ticket_id)
        if not Ticket.objects.alive().filter(org_id=org_id, id=ticket_id).exists():
            raise NotFoundError("Ticket not found.")

        tickets = list(obj.associated_tickets or [])
        if ticket_id in tickets:
            return obj

        _prepend_activity(obj, f"Associated with ticket {ticket_id}")
        return asset_repo.apply(
            obj=obj,
            updates={"associated_tickets": tickets + [ticket_id], "activity_logs": obj.activity_logs},
            actor_user_id=actor_user_id,
            action="ticket_associated",
        )

    @staticmethod
    @transaction.atomic
    def remove_ticket(*, org_id: UUID, asset_id, ticket_id, actor_user_id: int | None) -> Asset:
        obj = asset_repo.get(org_id=org_id, entity_id=asset_id, for_update=True)
        ticket_id = str(ticket_id)

        tickets = list(obj.associated_tickets or [])
        if ticket_id not in tickets:
            return obj

        _prepend_activity(obj, f"Removed association with ticket {ticket_id}")
        return asset_repo.apply(
            obj=obj,
            updates={"associated_tickets": [t for t in tickets if t != ticket_id], "activity_logs": obj.activity_logs},
            actor_user_id=actor_user_id,
            action="ticket_removed",
        )

    @staticmethod
    def linked_tickets(*, org_id: UUID, asset: Asset) -> list:
        Ticket = apps.get_model("tickets", "Ticket")
        ids = list(asset.associated_tickets or [])
        if not ids:
            return []
        return list(Ticket.objects.alive().filter(org_id=org_id, id__in=ids).order_by("-created_at"))

    # -------------------------
    # Maintenance
    # -------------------------
    @staticmethod
    def list_maintenance(*, org_id: UUID, asset_id):
        asset = asset_repo.get(org_id=org_id, entity_id=asset_id)
        return AssetMaintenanceRecord.objects.filter(org_id=org_id, asset=asset).order_by("-performed_at")

    @staticmethod
    @transaction.atomic
    def add_maintenance_record(
        *,
        org_id: UUID,
        asset_id,
        actor_user_id: int | None,
        data: dict,
    ) -> AssetMaintenanceRecord:
        asset = asset_repo.get(org_id=org_id, entity_id=asset_id, for_update=True)

        record = AssetMaintenanceRecord.objects.create(
            org_id=org_id,
            asset=asset,
            maintenance_type=data["maintenance_type"],
            description=data["description"],
            performed_by=data["performed_by"],
            performed_at=data["performed_at"],
            cost=data.get("cost"),
            next_due_date=data.get("next_due_date"),
            notes=data.get("notes", ""),
            created_by_id=actor_user_id,
        )

        updates: dict[str, Any] = {}
        if record.next_due_date:
            updates["next_maintenance_date"] = record.next_due_date
            updates["last_maintenance_date"] = timezone.localdate()

        _prepend_activity(
            asset,
            f"{record.maintenance_type} maintenance completed: {record.description}",
            record.performed_by,
        )
        updates["activity_logs"] = asset.activity_logs

        asset_repo.apply(obj=asset, updates=updates, actor_user_id=actor_user_id, action="maintenance_recorded")
        logger.info("maintenance recorded asset=%s type=%s org=%s", asset.id, record.maintenance_type, org_id)
        return record

    # -------------------------
    # Inventory deployment
    # -------------------------
    @staticmethod
    def create_from_inventory_deployment(
        *,
        org_id: UUID,
        item,
        payload: dict,
        actor_user_id: int | None,
        performed_by: Optional[str] = None,
    ) -> Asset:
        """
        Builds the asset for an inventory deployment. Runs inside the caller's
        transaction so a failure here rolls back the stock decrement too.
        """
        asset_type = payload["asset_type"]
        category = payload.get("category") or TYPE_CATEGORY.get(asset_type, "")

        purchase_info = item.purchase_info or {}
        warranty_info = item.warranty_info or {}
        serials = item.serial_numbers or []

        data = {
            "name": payload["asset_name"],
            "client": payload["client"],
            "type": asset_type,
            "status": AssetStatus.ONLINE,
            "is_secure": False,
            "last_seen": timezone.now(),
            "ip_address": payload.get("ip_address") or "",
            "mac_address": payload.get("mac_address") or "",
            "location": payload.get("location") or "",
            "notes": payload.get("notes") or f"Deployed from inventory item: {item.name} ({item.sku})",
            "sku": item.sku,
            "purchase_date": purchase_info.get("purchase_date") or None,
            "warranty_expiration": warranty_info.get("end_date") or None,
            "specifications": {"serial_number": serials[0]} if serials else {},
            "depreciation": depreciation_block(
                org_id=org_id,
                category=category,
                purchase_cost=item.unit_cost or Decimal("0"),
                purchase_date=purchase_info.get("purchase_date"),
            ),
        }
        if category and find_setting(org_id=org_id, module="asset", kind="category", name=category):
            data["category"] = category

        asset = asset_repo.create(
            org_id=org_id,
            actor_user_id=actor_user_id,
            data=data,
            extra={"source_inventory_item": item.id},
        )

        _prepend_activity(asset, f"Created from inventory deployment of {item.name} ({item.sku})", performed_by)
        asset.save(update_fields=["activity_logs", "updated_at"])
        return asset

    # -------------------------
    # Stats
    # -------------------------
    @staticmethod
    def stats(*, org_id: UUID) -> dict:
        qs = asset_repo.queryset(org_id=org_id).order_by()
        today = timezone.localdate()

        agg = qs.aggregate(
            total=Count("id"),
            online=Count("id", filter=Q(status=AssetStatus.ONLINE)),
            offline=Count("id", filter=Q(status=AssetStatus.OFFLINE)),
            warning=Count("id", filter=Q(status=AssetStatus.WARNING)),
            secured=Count("id", filter=Q(is_secure=True)),
            at_risk=Count("id", filter=Q(is_secure=False)),
            avg_cpu=Avg("cpu_usage"),
            avg_memory=Avg(_usage_pct("ram_used", "ram_total")),
            avg_disk=Avg(_usage_pct("disk_used", "disk_total")),
        )

        by_type = {t: 0 for t in AssetType.values}
        for row in qs.values("type").annotate(n=Count("id")):
            by_type[row["type"]] = row["n"]

        by_location = {
            (row["location"] or "Unassigned"): row["n"]
            for row in qs.values("location").annotate(n=Count("id")).order_by("location")
        }

        return {
            "total": agg["total"],
            "online": agg["online"],
            "offline": agg["offline"],
            "warning": agg["warning"],
            "secured": agg["secured"],
            "at_risk": agg["at_risk"],
            "avg_cpu_usage": round(agg["avg_cpu"] or 0),
            "avg_memory_usage": round(agg["avg_memory"] or 0),
            "avg_disk_usage": round(agg["avg_disk"] or 0),
            "maintenance_due": qs.filter(next_maintenance_date__lte=today).count(),
            "warranty_expiring": qs.filter(
                warranty_expiration__gte=today, warranty_expiration__lte=today + timedelta(days=30)
            ).count(),
            "by_type": by_type,
            "by_location": by_location,
        }
