# backend/dw_core/inventory/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.assets.api.serializers import AssetSerializer
from dw_core.common.api.fields import EnumChoiceField
from dw_core.inventory.models import InventoryCategory, InventoryItem, StockMovement


def _iso_dates(data: dict) -> dict:
    # JSON columns hold dates as ISO strings
    return {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in data.items()}


class WarrantyInfoSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    provider = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def to_internal_value(self, data):
        return _iso_dates(super().to_internal_value(data))


class PurchaseInfoSerializer(serializers.Serializer):
    purchase_order_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    purchase_date = serializers.DateField(required=False, allow_null=True)
    vendor = serializers.CharField(max_length=255, required=False, allow_blank=True)
    invoice_number = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def to_internal_value(self, data):
        return _iso_dates(super().to_internal_value(data))


class InventoryItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "org_id",
            "sku",
            "name",
            "category",
            "owner",
            "location",
            "supplier",
            "quantity",
            "reorder_point",
            "unit_cost",
            "total_value",
            "supplier_sku",
            "barcode",
            "serial_numbers",
            "warranty_info",
            "purchase_info",
            "notes",
            "deployment_history",
            "is_deleted",
            "deleted_at",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InventoryItemWriteSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    category = EnumChoiceField(choices=InventoryCategory.choices)
    owner = serializers.CharField(max_length=255, required=False)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    supplier = serializers.CharField(max_length=255, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=0, required=False)
    reorder_point = serializers.IntegerField(min_value=0, required=False)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    supplier_sku = serializers.CharField(max_length=64, required=False, allow_blank=True)
    barcode = serializers.CharField(max_length=64, required=False, allow_blank=True)
    serial_numbers = serializers.ListField(child=serializers.CharField(max_length=128), required=False)
    warranty_info = WarrantyInfoSerializer(required=False)
    purchase_info = PurchaseInfoSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class StockAdjustSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=500)
    reference = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class DeploySerializer(serializers.Serializer):
    deployed_to = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class DeployAssetRequestSerializer(serializers.Serializer):
    """
    Schema only; the service validates and reports the first problem as a plain message.
    """
    asset_name = serializers.CharField()
    client = serializers.CharField()
    asset_type = serializers.ChoiceField(choices=["Server", "Workstation", "Network", "Printer"])
    category = serializers.CharField(required=False)
    ip_address = serializers.CharField(required=False)
    mac_address = serializers.CharField(required=False)
    location = serializers.CharField(required=False)
    notes = serializers.CharField(required=False)


class DeployAssetResponseSerializer(serializers.Serializer):
    inventory_item = InventoryItemSerializer()
    asset = AssetSerializer()
    message = serializers.CharField()


class StockMovementSerializer(serializers.ModelSerializer):
    inventory_item_name = serializers.CharField(source="inventory_item.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "inventory_item",
            "inventory_item_name",
            "movement_type",
            "quantity",
            "previous_quantity",
            "new_quantity",
            "reason",
            "reference",
            "performed_by",
            "performed_at",
        ]
        read_only_fields = fields


class InventoryStatsSerializer(serializers.Serializer):
    total_items = serializers.IntegerField()
    total_value = serializers.FloatField()
    low_stock = serializers.IntegerField()
    out_of_stock = serializers.IntegerField()
    categories = serializers.IntegerField()
    locations = serializers.IntegerField()
    avg_item_value = serializers.FloatField()
    recent_movements = serializers.IntegerField()
    msp_owned = serializers.IntegerField()
    client_owned = serializers.IntegerField()
