# backend/dw_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from dw_core.assets.api.views import AssetViewSet
from dw_core.audit.api.views import AuditEventViewSet
from dw_core.change_requests.api.views import ChangeRequestViewSet
from dw_core.custom_fields.api.views import CustomFieldViewSet
from dw_core.iam.api.auth import LoginView, LogoutView, RefreshView
from dw_core.iam.api.me import MeView
from dw_core.inventory.api.views import InventoryItemViewSet
from dw_core.organizations.api.views import ModuleSettingsView, OrganizationView, SetupUserView
from dw_core.portal.api.views import PortalToolListView, PortalToolRunView
from dw_core.projects.api.views import ProjectViewSet
from dw_core.quotes.api.views import QuoteViewSet
from dw_core.settings_registry.api.views import (
    AssetSettingsViewSet,
    ChangeManagementSettingsViewSet,
    InventorySettingsViewSet,
    ProjectSettingsViewSet,
    TicketSettingsViewSet,
)
from dw_core.tickets.api.views import TicketViewSet

router = DefaultRouter()

# Settings registries (one route per module)
router.register(r"settings/asset-settings", AssetSettingsViewSet, basename="asset-settings")
router.register(r"settings/change-management-settings", ChangeManagementSettingsViewSet, basename="change-management-settings")
router.register(r"settings/inventory-settings", InventorySettingsViewSet, basename="inventory-settings")
router.register(r"settings/project-settings", ProjectSettingsViewSet, basename="project-settings")
router.register(r"settings/ticket-settings", TicketSettingsViewSet, basename="ticket-settings")
router.register(r"custom-fields", CustomFieldViewSet, basename="custom-fields")

# Entity modules
router.register(r"assets", AssetViewSet, basename="assets")
router.register(r"inventory", InventoryItemViewSet, basename="inventory")
router.register(r"change-requests", ChangeRequestViewSet, basename="change-requests")
router.register(r"tickets", TicketViewSet, basename="tickets")
router.register(r"projects", ProjectViewSet, basename="projects")
router.register(r"quotes", QuoteViewSet, basename="quotes")

router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # 🔐 Auth + /me + first sign-in bootstrap
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/setup-user/", SetupUserView.as_view(), name="setup-user"),
    path("me/", MeView.as_view(), name="me"),

    # ✅ Organization profile + module toggles
    path("organization/", OrganizationView.as_view(), name="organization"),
    path("settings/modules/", ModuleSettingsView.as_view(), name="settings-modules"),

    # ✅ Portal assistant tools
    path("portal/tools/", PortalToolListView.as_view(), name="portal-tools"),
    path("portal/tools/<str:name>/", PortalToolRunView.as_view(), name="portal-tool-run"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
