# backend/dw_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from dw_core.iam.models import OrganizationMembership, Role, UserProfile


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "organization", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name", "organization__name")
    ordering = ("organization", "code")


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "organization", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("user__username", "user__email")
    ordering = ("-created_at",)


@admin.register(OrganizationMembership)
class OrganizationMembershipAdmin(admin.ModelAdmin):
    list_display = ("organization", "user_profile", "role", "is_active", "is_primary")
    list_filter = ("role__code", "is_active", "is_primary")
    search_fields = ("organization__name", "user_profile__user__username", "user_profile__user__email")
