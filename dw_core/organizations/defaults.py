# backend/dw_core/organizations/defaults.py
from __future__ import annotations

CORE_MODULES = (
    "dashboard",
    "tickets",
    "incidents",
    "assets",
    "inventory",
    "knowledge",
    "projects",
    "scheduling",
    "change",
    "reports",
    "settings",
)

# Only meaningful for MSPs; switched off in Internal IT mode.
MSP_MODULES = (
    "clients",
    "contacts",
    "billing",
    "quotes",
    "contracts",
    "service_catalog",
)

MODULE_IDS = CORE_MODULES + MSP_MODULES


def default_enabled_modules() -> dict[str, bool]:
    modules = {m: True for m in CORE_MODULES}
    modules.update({m: False for m in MSP_MODULES})
    return modules


def default_features() -> dict[str, bool]:
    return {
        "sso_enabled": False,
        "directory_sync_enabled": False,
        "audit_logs_enabled": False,
        "api_access_enabled": False,
        "custom_fields_enabled": False,
        "advanced_reporting_enabled": False,
        "white_labeling": False,
    }


def default_settings() -> dict:
    return {
        "default_ticket_priority": "Medium",
        "auto_assign_tickets": False,
        "require_ticket_approval": False,
        "allow_client_portal_access": True,
        "maintenance_mode": False,
        "data_retention_days": 365,
        "max_users_allowed": 25,
        "max_storage_gb": 10,
    }
