# backend/dw_core/inventory/services.py
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Avg, Count, F, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from dw_core.assets.models import AssetType
from dw_core.assets.services import AssetService
from dw_core.common.api.exceptions import NotFoundError
from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.inventory.models import OWNER_MSP, InventoryItem, MovementType, StockMovement

logger = logging.getLogger(__name__)

DEFAULT_MOVEMENTS_LIMIT = 50
OUT_OF_STOCK_MSG = "Inventory item not found or out of stock"


def _value(unit_cost, quantity) -> Decimal:
    return (Decimal(str(unit_cost)) * int(quantity)).quantize(Decimal("0.01"))


def _clean_item(*, org_id: UUID, data: dict, instance=None) -> dict:
    if "quantity" in data or "unit_cost" in data:
        quantity = data.get("quantity", getattr(instance, "quantity", 0))
        unit_cost = data.get("unit_cost", getattr(instance, "unit_cost", None))
        if unit_cost is not None:
            data["total_value"] = _value(unit_cost, quantity)
    return data


INVENTORY_POLICY = EntityPolicy(
    entity_type="InventoryItem",
    event_prefix="inventory.item",
    writable_fields=frozenset(
        {
            "sku", "name", "category", "owner", "location", "supplier",
            "quantity", "reorder_point", "unit_cost",
            "supplier_sku", "barcode", "serial_numbers",
            "warranty_info", "purchase_info", "notes",
        }
    ),
    search_fields=("name", "sku", "category", "location", "supplier", "supplier_sku", "barcode"),
    ordering=("name",),
    usage_module="inventory",
    clean=_clean_item,
    audit_fields=("sku", "name", "quantity"),
)

inventory_repo = EntityRepository(InventoryItem, INVENTORY_POLICY)


def _record_movement(
    *,
    item: InventoryItem,
    movement_type: str,
    quantity: int,
    previous_quantity: int,
    new_quantity: int,
    reason: str = "",
    reference: str = "",
    performed_by: Optional[str] = None,
    actor_user_id: int | None = None,
) -> StockMovement:
    return StockMovement.objects.create(
        org_id=item.org_id,
        inventory_item=item,
        movement_type=movement_type,
        quantity=quantity,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        reason=reason or "",
        reference=reference or "",
        performed_by=performed_by or "system",
        performed_by_user_id=actor_user_id,
        performed_at=timezone.now(),
    )


def _validate_deploy_payload(payload: dict) -> None:
    name = payload.get("asset_name")
    if not name or not isinstance(name, str) or not name.strip():
        raise ValidationError("Asset name is required")

    client = payload.get("client")
    if not client or not isinstance(client, str) or not client.strip():
        raise ValidationError("Client is required")

    if payload.get("asset_type") not in AssetType.values:
        raise ValidationError("Valid asset type is required (Server, Workstation, Network, Printer)")


class InventoryService:
    @staticmethod
    def get(*, org_id: UUID, item_id, include_deleted: bool = False) -> InventoryItem:
        return inventory_repo.get(org_id=org_id, entity_id=item_id, include_deleted=include_deleted)

    @staticmethod
    @transaction.atomic
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict, performed_by: Optional[str] = None) -> InventoryItem:
        item = inventory_repo.create(org_id=org_id, actor_user_id=actor_user_id, data=data)
        if item.quantity > 0:
            _record_movement(
                item=item,
                movement_type=MovementType.IN,
                quantity=item.quantity,
                previous_quantity=0,
                new_quantity=item.quantity,
                reason="Initial stock",
                performed_by=performed_by,
                actor_user_id=actor_user_id,
            )
        return item

    @staticmethod
    @transaction.atomic
    def update(
        *,
        org_id: UUID,
        item_id,
        actor_user_id: int | None,
        data: dict,
        performed_by: Optional[str] = None,
    ) -> InventoryItem:
        item = inventory_repo.get(org_id=org_id, entity_id=item_id, for_update=True)
        previous = item.quantity

        updates = _clean_item(
            org_id=org_id,
            data={k: v for k, v in data.items() if k in INVENTORY_POLICY.writable_fields},
            instance=item,
        )
        inventory_repo.apply(obj=item, updates=updates, actor_user_id=actor_user_id)

        # edits that change stock still land in the ledger
        if "quantity" in updates and updates["quantity"] != previous:
            _record_movement(
                item=item,
                movement_type=MovementType.ADJUSTMENT,
                quantity=abs(updates["quantity"] - previous),
                previous_quantity=previous,
                new_quantity=updates["quantity"],
                reason="Quantity edited",
                performed_by=performed_by,
                actor_user_id=actor_user_id,
            )
        return item

    @staticmethod
    def delete(*, org_id: UUID, item_id, actor_user_id: int | None) -> bool:
        return inventory_repo.delete(org_id=org_id, entity_id=item_id, actor_user_id=actor_user_id)

    @staticmethod
    def restore(*, org_id: UUID, item_id, actor_user_id: int | None) -> InventoryItem:
        return inventory_repo.restore(org_id=org_id, entity_id=item_id, actor_user_id=actor_user_id)

    # -------------------------
    # Stock changes
    # -------------------------
    @staticmethod
    @transaction.atomic
    def adjust_stock(
        *,
        org_id: UUID,
        item_id,
        quantity: int,
        reason: str,
        actor_user_id: int | None,
        performed_by: Optional[str] = None,
        reference: str = "",
    ) -> InventoryItem:
        if quantity is None or int(quantity) < 0:
            raise ValidationError({"quantity": ["Quantity must be zero or greater."]})
        if not (reason or "").strip():
            raise ValidationError({"reason": ["Reason is required."]})

        item = inventory_repo.get(org_id=org_id, entity_id=item_id, for_update=True)
        previous = item.quantity
        quantity = int(quantity)

        updates = {"quantity": quantity}
        if item.unit_cost is not None:
            updates["total_value"] = _value(item.unit_cost, quantity)

        inventory_repo.apply(obj=item, updates=updates, actor_user_id=actor_user_id, action="stock_adjusted")
        _record_movement(
            item=item,
            movement_type=MovementType.ADJUSTMENT,
            quantity=abs(quantity - previous),
            previous_quantity=previous,
            new_quantity=quantity,
            reason=reason.strip(),
            reference=reference,
            performed_by=performed_by,
            actor_user_id=actor_user_id,
        )

        logger.info("stock adjusted item=%s org=%s %s -> %s", item.id, org_id, previous, quantity)
        return item

    @staticmethod
    def _take_one(
        *,
        org_id: UUID,
        item_id,
        deployed_to: str,
        actor_user_id: int | None,
        performed_by: Optional[str],
    ) -> tuple[InventoryItem, int]:
        """
        Locks the item and removes one unit. Caller owns the transaction.
        Returns (item, previous_quantity); the deployment record is appended by the caller.
        """
        try:
            item = inventory_repo.get(org_id=org_id, entity_id=item_id, for_update=True)
        except NotFoundError:
            raise NotFoundError(OUT_OF_STOCK_MSG)

        if item.quantity <= 0:
            logger.warning("deploy rejected, out of stock item=%s org=%s", item.id, org_id)
            raise NotFoundError(OUT_OF_STOCK_MSG)

        previous = item.quantity
        item.quantity = previous - 1
        if item.unit_cost is not None:
            item.total_value = _value(item.unit_cost, item.quantity)

        _record_movement(
            item=item,
            movement_type=MovementType.DEPLOYMENT,
            quantity=1,
            previous_quantity=previous,
            new_quantity=item.quantity,
            reason=f"Deployed as asset to {deployed_to}",
            reference=deployed_to,
            performed_by=performed_by,
            actor_user_id=actor_user_id,
        )
        return item, previous

    @staticmethod
    def _deployment_entry(*, deployed_to: str, performed_by: Optional[str], notes: str, asset_id=None) -> dict:
        entry = {
            "deployed_to": deployed_to,
            "deployed_by": performed_by or "system",
            "deployed_at": timezone.now().isoformat(),
            "notes": notes or "",
        }
        if asset_id is not None:
            entry["asset_id"] = str(asset_id)
        return entry

    @staticmethod
    @transaction.atomic
    def deploy(
        *,
        org_id: UUID,
        item_id,
        deployed_to: str,
        actor_user_id: int | None,
        performed_by: Optional[str] = None,
        notes: str = "",
    ) -> InventoryItem:
        """Hand one unit to a client or site without creating an asset."""
        if not (deployed_to or "").strip():
            raise ValidationError({"deployed_to": ["This field is required."]})

        item, _ = InventoryService._take_one(
            org_id=org_id,
            item_id=item_id,
            deployed_to=deployed_to,
            actor_user_id=actor_user_id,
            performed_by=performed_by,
        )
        history = list(item.deployment_history or [])
        history.append(InventoryService._deployment_entry(deployed_to=deployed_to, performed_by=performed_by, notes=notes))

        inventory_repo.apply(
            obj=item,
            updates={"quantity": item.quantity, "total_value": item.total_value, "deployment_history": history},
            actor_user_id=actor_user_id,
            action="deployed",
        )
        logger.info("inventory deployed item=%s to=%r org=%s", item.id, deployed_to, org_id)
        return item

    @staticmethod
    @transaction.atomic
    def deploy_asset(
        *,
        org_id: UUID,
        item_id,
        payload: dict,
        actor_user_id: int | None,
        performed_by: Optional[str] = None,
    ):
        """
        Decrement stock and create the linked Asset as one unit of work.
        Any failure (including asset validation) rolls back every write.

        Returns (item, asset).
        """
        _validate_deploy_payload(payload)

        deployed_to = f"Asset: {payload['asset_name'].strip()}"
        notes = payload.get("notes") or ""

        item, _ = InventoryService._take_one(
            org_id=org_id,
            item_id=item_id,
            deployed_to=deployed_to,
            actor_user_id=actor_user_id,
            performed_by=performed_by,
        )

        asset = AssetService.create_from_inventory_deployment(
            org_id=org_id,
            item=item,
            payload={**payload, "asset_name": payload["asset_name"].strip(), "client": payload["client"].strip()},
            actor_user_id=actor_user_id,
            performed_by=performed_by,
        )

        history = list(item.deployment_history or [])
        history.append(
            InventoryService._deployment_entry(
                deployed_to=deployed_to, performed_by=performed_by, notes=notes, asset_id=asset.id
            )
        )

        inventory_repo.apply(
            obj=item,
            updates={"quantity": item.quantity, "total_value": item.total_value, "deployment_history": history},
            actor_user_id=actor_user_id,
            action="deployed",
        )

        logger.info("inventory item=%s deployed as asset=%s org=%s", item.id, asset.id, org_id)
        return item, asset

    # -------------------------
    # Reads
    # -------------------------
    @staticmethod
    def movements(*, org_id: UUID, item_id=None, limit: int = DEFAULT_MOVEMENTS_LIMIT):
        qs = StockMovement.objects.filter(org_id=org_id).select_related("inventory_item")
        if item_id is not None:
            item = inventory_repo.get(org_id=org_id, entity_id=item_id, include_deleted=True)
            qs = qs.filter(inventory_item=item)
        return qs.order_by("-performed_at")[:limit]

    @staticmethod
    def low_stock(*, org_id: UUID):
        return inventory_repo.queryset(org_id=org_id).filter(quantity__lte=F("reorder_point"))

    @staticmethod
    def out_of_stock(*, org_id: UUID):
        return inventory_repo.queryset(org_id=org_id).filter(quantity__lte=0)

    @staticmethod
    def stats(*, org_id: UUID) -> dict:
        qs = inventory_repo.queryset(org_id=org_id).order_by()

        agg = qs.aggregate(
            total_items=Count("id"),
            value_sum=Sum("total_value"),
            value_avg=Avg("total_value"),
            low_stock=Count("id", filter=Q(quantity__lte=F("reorder_point"))),
            out_of_stock=Count("id", filter=Q(quantity__lte=0)),
            msp_owned=Count("id", filter=Q(owner=OWNER_MSP)),
            client_owned=Count("id", filter=~Q(owner=OWNER_MSP)),
            categories=Count("category", distinct=True),
            locations=Count("location", distinct=True),
        )

        since = timezone.now() - timedelta(days=30)
        recent = StockMovement.objects.filter(org_id=org_id, performed_at__gte=since).count()

        return {
            "total_items": agg["total_items"],
            "total_value": float(agg["value_sum"] or 0),
            "low_stock": agg["low_stock"],
            "out_of_stock": agg["out_of_stock"],
            "categories": agg["categories"],
            "locations": agg["locations"],
            "avg_item_value": round(float(agg["value_avg"] or 0), 2),
            "recent_movements": recent,
            "msp_owned": agg["msp_owned"],
            "client_owned": agg["client_owned"],
        }
