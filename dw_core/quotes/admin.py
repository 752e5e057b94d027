# backend/dw_core/quotes/admin.py
from django.contrib import admin

from dw_core.quotes.models import Quote


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ("subject", "client_name", "status", "total", "expiry_date", "org_id", "is_deleted")
    list_filter = ("status", "is_deleted")
    search_fields = ("subject", "client_name", "client_id")
    ordering = ("-created_at",)
