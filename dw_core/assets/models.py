# backend/dw_core/assets/models.py
from django.conf import settings
from django.db import models

from dw_core.common.models import OrgScopedModel, SoftDeleteModel


class AssetType(models.TextChoices):
    SERVER = "Server", "Server"
    WORKSTATION = "Workstation", "Workstation"
    NETWORK = "Network", "Network"
    PRINTER = "Printer", "Printer"


class AssetStatus(models.TextChoices):
    ONLINE = "Online", "Online"
    OFFLINE = "Offline", "Offline"
    WARNING = "Warning", "Warning"


class MaintenanceFrequency(models.TextChoices):
    WEEKLY = "weekly", "Weekly"
    MONTHLY = "monthly", "Monthly"
    QUARTERLY = "quarterly", "Quarterly"
    ANNUALLY = "annually", "Annually"


class Asset(SoftDeleteModel):
    name = models.CharField(max_length=255)
    client = models.CharField(max_length=255, db_index=True)
    type = models.CharField(max_length=16, choices=AssetType.choices, db_index=True)
    status = models.CharField(max_length=16, choices=AssetStatus.choices, default=AssetStatus.ONLINE, db_index=True)

    # names from the asset settings registry
    category = models.CharField(max_length=128, blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")

    is_secure = models.BooleanField(default=False)
    last_seen = models.DateTimeField(null=True, blank=True)
    ip_address = models.CharField(max_length=64, blank=True, default="")
    mac_address = models.CharField(max_length=64, blank=True, default="")
    os = models.CharField(max_length=128, blank=True, default="")

    cpu_model = models.CharField(max_length=128, blank=True, default="")
    cpu_usage = models.FloatField(default=0)
    ram_total = models.FloatField(default=0)
    ram_used = models.FloatField(default=0)
    disk_total = models.FloatField(default=0)
    disk_used = models.FloatField(default=0)

    notes = models.TextField(blank=True, default="")

    # [{timestamp, activity}], newest first
    activity_logs = models.JSONField(default=list, blank=True)
    # [TicketId]
    associated_tickets = models.JSONField(default=list, blank=True)
    specifications = models.JSONField(default=dict, blank=True)

    sku = models.CharField(max_length=64, blank=True, default="")
    purchase_date = models.DateField(null=True, blank=True)
    warranty_expiration = models.DateField(null=True, blank=True)

    maintenance_schedule = models.CharField(max_length=16, choices=MaintenanceFrequency.choices, blank=True, default="")
    next_maintenance_date = models.DateField(null=True, blank=True)
    last_maintenance_date = models.DateField(null=True, blank=True)

    depreciation = models.JSONField(default=dict, blank=True)
    source_inventory_item = models.UUIDField(null=True, blank=True)
    custom_fields = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "assets_asset"
        indexes = [
            models.Index(fields=["org_id", "is_deleted", "created_at"]),
            models.Index(fields=["org_id", "type", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


class MaintenanceType(models.TextChoices):
    PREVENTIVE = "preventive", "Preventive"
    CORRECTIVE = "corrective", "Corrective"
    EMERGENCY = "emergency", "Emergency"


class AssetMaintenanceRecord(OrgScopedModel):
    asset = models.ForeignKey(Asset, on_delete=models.PROTECT, related_name="maintenance_records")

    maintenance_type = models.CharField(max_length=16, choices=MaintenanceType.choices)
    description = models.TextField()
    performed_by = models.CharField(max_length=255)
    performed_at = models.DateTimeField()
    cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    next_due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "assets_maintenance_record"
        ordering = ["-performed_at"]
        indexes = [
            models.Index(fields=["org_id", "asset", "performed_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.maintenance_type} on {self.asset_id}"
