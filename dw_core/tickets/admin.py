# backend/dw_core/tickets/admin.py
from django.contrib import admin

from dw_core.tickets.models import Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("subject", "client", "status", "priority", "queue", "assignee", "org_id", "is_deleted")
    list_filter = ("status", "priority", "queue", "is_deleted")
    search_fields = ("subject", "client", "assignee")
    ordering = ("-created_at",)
