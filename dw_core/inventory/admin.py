# backend/dw_core/inventory/admin.py
from django.contrib import admin

from dw_core.inventory.models import InventoryItem, StockMovement


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "category", "owner", "location", "quantity", "reorder_point", "is_deleted")
    list_filter = ("category", "is_deleted")
    search_fields = ("sku", "name", "supplier", "barcode")
    ordering = ("name",)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("inventory_item", "movement_type", "quantity", "previous_quantity", "new_quantity", "performed_at")
    list_filter = ("movement_type",)
    ordering = ("-performed_at",)
    readonly_fields = ("performed_at",)
