# backend/dw_core/organizations/admin.py
from django.contrib import admin

from dw_core.organizations.models import Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "subdomain", "subscription_tier", "subscription_status", "is_internal_it_mode", "is_deleted")
    list_filter = ("subscription_tier", "subscription_status", "is_internal_it_mode", "is_deleted")
    search_fields = ("name", "subdomain", "workos_org_id")
    ordering = ("-created_at",)
    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("id", "name", "subdomain", "workos_org_id", "time_zone")}),
        ("Modules", {"fields": ("is_internal_it_mode", "enabled_modules")}),
        ("Subscription", {"fields": ("subscription_tier", "subscription_status", "billing_cycle")}),
        ("Configuration", {"fields": ("features", "settings")}),
        ("Timestamps", {"fields": ("created_at", "updated_at", "is_deleted", "deleted_at")}),
    )
