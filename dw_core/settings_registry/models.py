# backend/dw_core/settings_registry/models.py
from django.db import models
from django.db.models.functions import Lower

from dw_core.common.models import SoftDeleteModel


class SettingModule(models.TextChoices):
    ASSET = "asset", "Asset"
    CHANGE_MANAGEMENT = "change_management", "Change Management"
    INVENTORY = "inventory", "Inventory"
    PROJECT = "project", "Project"
    TICKET = "ticket", "Ticket"


class SettingKind(models.TextChoices):
    STATUS = "status", "Status"
    CATEGORY = "category", "Category"
    RISK = "risk", "Risk"
    IMPACT = "impact", "Impact"
    LOCATION = "location", "Location"
    QUEUE = "queue", "Queue"
    PRIORITY = "priority", "Priority"
    SUPPLIER = "supplier", "Supplier"


# which kinds each module's registry holds
MODULE_KINDS: dict[str, tuple[str, ...]] = {
    SettingModule.ASSET: (SettingKind.CATEGORY, SettingKind.STATUS, SettingKind.LOCATION),
    SettingModule.CHANGE_MANAGEMENT: (SettingKind.CATEGORY, SettingKind.RISK, SettingKind.IMPACT),
    SettingModule.INVENTORY: (SettingKind.CATEGORY, SettingKind.LOCATION, SettingKind.SUPPLIER),
    SettingModule.PROJECT: (SettingKind.STATUS,),
    SettingModule.TICKET: (SettingKind.QUEUE, SettingKind.STATUS, SettingKind.PRIORITY),
}


class SettingItem(SoftDeleteModel):
    """
    One user-defined enumeration value (a status, category, risk level, queue...)
    in an organization's per-module settings registry.

    Entities reference settings by name; `in_use_count` is recomputed from live
    entity rows whenever those entities change.
    """
    module = models.CharField(max_length=32, choices=SettingModule.choices, db_index=True)
    kind = models.CharField(max_length=16, choices=SettingKind.choices, db_index=True)

    name = models.CharField(max_length=128)
    color = models.CharField(max_length=16, default="#6b7280")
    description = models.TextField(blank=True, default="")
    sort_order = models.PositiveIntegerField(default=0)

    is_default = models.BooleanField(default=False)
    is_system = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    in_use_count = models.PositiveIntegerField(default=0)

    # per-kind extras (depreciation rate, SLA minutes, required approvers...)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "settings_registry_setting_item"
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                "org_id",
                "module",
                "kind",
                condition=models.Q(is_deleted=False),
                name="uq_setting_live_name_per_kind",
            ),
        ]
        indexes = [
            models.Index(fields=["org_id", "module", "kind"]),
        ]

    def __str__(self) -> str:
        return f"{self.module}/{self.kind}: {self.name}"
