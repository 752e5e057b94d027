# backend/dw_core/inventory/models.py
from django.conf import settings
from django.db import models

from dw_core.common.models import OrgScopedModel, SoftDeleteModel

OWNER_MSP = "MSP"


class InventoryCategory(models.TextChoices):
    HARDWARE = "Hardware", "Hardware"
    SOFTWARE_LICENSE = "Software License", "Software License"
    CONSUMABLE = "Consumable", "Consumable"
    PART = "Part", "Part"


class InventoryItem(SoftDeleteModel):
    sku = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=32, choices=InventoryCategory.choices, db_index=True)
    owner = models.CharField(max_length=255, default=OWNER_MSP)  # "MSP" or a client name

    # names from the inventory settings registry
    location = models.CharField(max_length=255, blank=True, default="")
    supplier = models.CharField(max_length=255, blank=True, default="")

    quantity = models.IntegerField(default=0)
    reorder_point = models.IntegerField(default=0)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_value = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    supplier_sku = models.CharField(max_length=64, blank=True, default="")
    barcode = models.CharField(max_length=64, blank=True, default="")
    serial_numbers = models.JSONField(default=list, blank=True)

    # {start_date, end_date, provider}
    warranty_info = models.JSONField(default=dict, blank=True)
    # {purchase_order_number, purchase_date, vendor, invoice_number}
    purchase_info = models.JSONField(default=dict, blank=True)

    notes = models.TextField(blank=True, default="")

    # [{deployed_to, deployed_by, deployed_at, notes, asset_id}]
    deployment_history = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "inventory_item"
        indexes = [
            models.Index(fields=["org_id", "is_deleted", "name"]),
            models.Index(fields=["org_id", "category"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"


class MovementType(models.TextChoices):
    IN = "in", "In"
    OUT = "out", "Out"
    ADJUSTMENT = "adjustment", "Adjustment"
    DEPLOYMENT = "deployment", "Deployment"
    RETURN = "return", "Return"


class StockMovement(OrgScopedModel):
    """
    Append-only stock ledger. One row per quantity change.
    """
    inventory_item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name="movements")

    movement_type = models.CharField(max_length=16, choices=MovementType.choices, db_index=True)
    quantity = models.PositiveIntegerField()
    previous_quantity = models.IntegerField()
    new_quantity = models.IntegerField()

    reason = models.CharField(max_length=500, blank=True, default="")
    reference = models.CharField(max_length=255, blank=True, default="")

    performed_by = models.CharField(max_length=255, default="system")
    performed_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    performed_at = models.DateTimeField(db_index=True)

    class Meta:
        db_table = "inventory_stock_movement"
        indexes = [
            models.Index(fields=["org_id", "performed_at"]),
            models.Index(fields=["org_id", "inventory_item", "performed_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.movement_type} {self.quantity} of {self.inventory_item_id}"
