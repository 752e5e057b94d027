# backend/dw_core/change_requests/admin.py
from django.contrib import admin

from dw_core.change_requests.models import ChangeApproval, ChangeRequest


@admin.register(ChangeRequest)
class ChangeRequestAdmin(admin.ModelAdmin):
    list_display = ("title", "client", "status", "risk_level", "impact", "planned_start_date", "is_deleted")
    list_filter = ("status", "risk_level", "impact", "is_deleted")
    search_fields = ("title", "client", "submitted_by")
    ordering = ("-created_at",)


@admin.register(ChangeApproval)
class ChangeApprovalAdmin(admin.ModelAdmin):
    list_display = ("change_request", "decision", "approver", "decided_at")
    list_filter = ("decision",)
    ordering = ("-decided_at",)
