# backend/dw_core/assets/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.assets.models import Asset, AssetMaintenanceRecord, AssetStatus, AssetType, MaintenanceFrequency, MaintenanceType
from dw_core.common.api.fields import EnumChoiceField, UUIDListField


class AssetSerializer(serializers.ModelSerializer):
    class Meta:
        model = Asset
        fields = [
            "id",
            "org_id",
            "name",
            "client",
            "type",
            "status",
            "category",
            "location",
            "is_secure",
            "last_seen",
            "ip_address",
            "mac_address",
            "os",
            "cpu_model",
            "cpu_usage",
            "ram_total",
            "ram_used",
            "disk_total",
            "disk_used",
            "notes",
            "activity_logs",
            "associated_tickets",
            "specifications",
            "sku",
            "purchase_date",
            "warranty_expiration",
            "maintenance_schedule",
            "next_maintenance_date",
            "last_maintenance_date",
            "depreciation",
            "source_inventory_item",
            "custom_fields",
            "is_deleted",
            "deleted_at",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AssetWriteSerializer(serializers.Serializer):
    """
    Create contract; PATCH reuses it with partial=True.
    """
    name = serializers.CharField(max_length=255)
    client = serializers.CharField(max_length=255)
    type = EnumChoiceField(choices=AssetType.choices)
    status = EnumChoiceField(choices=AssetStatus.choices, required=False)
    category = serializers.CharField(max_length=128, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)

    is_secure = serializers.BooleanField(required=False)
    last_seen = serializers.DateTimeField(required=False, allow_null=True)
    ip_address = serializers.CharField(max_length=64, required=False, allow_blank=True)
    mac_address = serializers.CharField(max_length=64, required=False, allow_blank=True)
    os = serializers.CharField(max_length=128, required=False, allow_blank=True)

    cpu_model = serializers.CharField(max_length=128, required=False, allow_blank=True)
    cpu_usage = serializers.FloatField(required=False, min_value=0, max_value=100)
    ram_total = serializers.FloatField(required=False, min_value=0)
    ram_used = serializers.FloatField(required=False, min_value=0)
    disk_total = serializers.FloatField(required=False, min_value=0)
    disk_used = serializers.FloatField(required=False, min_value=0)

    notes = serializers.CharField(required=False, allow_blank=True)
    specifications = serializers.JSONField(required=False)
    associated_tickets = UUIDListField(required=False)

    sku = serializers.CharField(max_length=64, required=False, allow_blank=True)
    purchase_date = serializers.DateField(required=False, allow_null=True)
    warranty_expiration = serializers.DateField(required=False, allow_null=True)
    maintenance_schedule = EnumChoiceField(choices=MaintenanceFrequency.choices, required=False, allow_blank=True)
    next_maintenance_date = serializers.DateField(required=False, allow_null=True)
    depreciation = serializers.JSONField(required=False)
    custom_fields = serializers.JSONField(required=False)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class ActivityCreateSerializer(serializers.Serializer):
    activity = serializers.CharField(max_length=1000)
    performed_by = serializers.CharField(max_length=255, required=False, allow_blank=True)


class TicketLinkSerializer(serializers.Serializer):
    ticket_id = serializers.UUIDField()


class MaintenanceRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = AssetMaintenanceRecord
        fields = [
            "id",
            "asset",
            "maintenance_type",
            "description",
            "performed_by",
            "performed_at",
            "cost",
            "next_due_date",
            "notes",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class MaintenanceRecordCreateSerializer(serializers.Serializer):
    maintenance_type = EnumChoiceField(choices=MaintenanceType.choices)
    description = serializers.CharField()
    performed_by = serializers.CharField(max_length=255)
    performed_at = serializers.DateTimeField()
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    next_due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AssetStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    online = serializers.IntegerField()
    offline = serializers.IntegerField()
    warning = serializers.IntegerField()
    secured = serializers.IntegerField()
    at_risk = serializers.IntegerField()
    avg_cpu_usage = serializers.IntegerField()
    avg_memory_usage = serializers.IntegerField()
    avg_disk_usage = serializers.IntegerField()
    maintenance_due = serializers.IntegerField()
    warranty_expiring = serializers.IntegerField()
    by_type = serializers.DictField(child=serializers.IntegerField())
    by_location = serializers.DictField(child=serializers.IntegerField())
