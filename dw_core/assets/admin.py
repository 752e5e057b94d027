# backend/dw_core/assets/admin.py
from django.contrib import admin

from dw_core.assets.models import Asset, AssetMaintenanceRecord


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ("name", "client", "type", "status", "category", "org_id", "is_deleted")
    list_filter = ("type", "status", "is_secure", "is_deleted")
    search_fields = ("name", "client", "ip_address", "mac_address", "sku")
    ordering = ("-created_at",)


@admin.register(AssetMaintenanceRecord)
class AssetMaintenanceRecordAdmin(admin.ModelAdmin):
    list_display = ("asset", "maintenance_type", "performed_by", "performed_at", "next_due_date")
    list_filter = ("maintenance_type",)
    ordering = ("-performed_at",)
