# backend/dw_core/projects/admin.py
from django.contrib import admin

from dw_core.projects.models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "client", "status", "start_date", "end_date", "progress", "is_deleted")
    list_filter = ("status", "is_deleted")
    search_fields = ("name", "client")
    ordering = ("-created_at",)
