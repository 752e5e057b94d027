# backend/dw_core/settings_registry/defaults.py
"""
Default setting sets seeded by `initialize`.

Each entry: (kind, name, color, extra) where extra may carry
description / is_default / is_system / metadata.
"""
from __future__ import annotations

from dw_core.settings_registry.models import SettingKind as K
from dw_core.settings_registry.models import SettingModule as M

DEFAULT_SETTINGS: dict[str, list[tuple[str, str, str, dict]]] = {
    M.ASSET: [
        (K.CATEGORY, "Servers", "#3b82f6", {
            "description": "Physical and virtual servers",
            "metadata": {"depreciation_rate": 33.33, "default_warranty_months": 36},
        }),
        (K.CATEGORY, "Workstations", "#10b981", {
            "description": "Desktops and laptops",
            "metadata": {"depreciation_rate": 25, "default_warranty_months": 24},
        }),
        (K.CATEGORY, "Network Equipment", "#f97316", {
            "description": "Routers, switches, firewalls and access points",
            "metadata": {"depreciation_rate": 20, "default_warranty_months": 60},
        }),
        (K.CATEGORY, "Peripherals", "#8b5cf6", {
            "description": "Printers, monitors and other peripherals",
            "metadata": {"depreciation_rate": 20, "default_warranty_months": 12},
        }),
        (K.CATEGORY, "Mobile Devices", "#ef4444", {
            "description": "Phones and tablets",
            "metadata": {"depreciation_rate": 33.33, "default_warranty_months": 12},
        }),
        (K.STATUS, "Active", "#22c55e", {"is_default": True}),
        (K.STATUS, "In Use", "#3b82f6", {}),
        (K.STATUS, "Available", "#06b6d4", {}),
        (K.STATUS, "Under Maintenance", "#f97316", {}),
        (K.STATUS, "Out of Service", "#ef4444", {}),
        (K.STATUS, "Retired", "#6b7280", {}),
    ],
    M.CHANGE_MANAGEMENT: [
        (K.CATEGORY, "Infrastructure", "#3b82f6", {
            "is_default": True,
            "description": "Servers, storage and network changes",
            "metadata": {"requires_approval": True, "requires_testing": True, "requires_rollback_plan": True},
        }),
        (K.CATEGORY, "Application", "#10b981", {
            "description": "Software deployments and configuration",
            "metadata": {"requires_approval": True, "requires_testing": True, "requires_rollback_plan": True},
        }),
        (K.CATEGORY, "Security", "#ef4444", {
            "description": "Security patches and policy changes",
            "metadata": {"requires_approval": True, "requires_testing": True, "requires_rollback_plan": True},
        }),
        (K.CATEGORY, "Emergency", "#dc2626", {
            "description": "Urgent fixes outside the normal window",
            "metadata": {"requires_approval": True, "requires_testing": False, "requires_rollback_plan": True},
        }),
        (K.RISK, "Low", "#10b981", {"is_system": True, "metadata": {"required_approvers": 1}}),
        (K.RISK, "Medium", "#f59e0b", {"is_system": True, "is_default": True, "metadata": {"required_approvers": 2}}),
        (K.RISK, "High", "#ef4444", {"is_system": True, "metadata": {"required_approvers": 3}}),
        (K.RISK, "Critical", "#dc2626", {"is_system": True, "metadata": {"required_approvers": 4}}),
        (K.IMPACT, "Low", "#10b981", {"is_system": True}),
        (K.IMPACT, "Medium", "#f59e0b", {"is_system": True, "is_default": True}),
        (K.IMPACT, "High", "#ef4444", {"is_system": True}),
    ],
    M.INVENTORY: [
        (K.LOCATION, "Main Warehouse", "#3b82f6", {"is_default": True}),
        (K.LOCATION, "Office Storage", "#10b981", {}),
        (K.LOCATION, "Field Technician Van", "#f97316", {}),
        (K.LOCATION, "Client Deployment Site", "#8b5cf6", {}),
        (K.SUPPLIER, "Dell Technologies", "#3b82f6", {}),
        (K.SUPPLIER, "CDW", "#ef4444", {}),
        (K.SUPPLIER, "Amazon Business", "#f97316", {}),
        (K.CATEGORY, "Hardware", "#3b82f6", {"is_default": True}),
        (K.CATEGORY, "Software", "#10b981", {}),
        (K.CATEGORY, "Consumables", "#f59e0b", {}),
        (K.CATEGORY, "Tools", "#6b7280", {}),
        (K.CATEGORY, "Spare Parts", "#8b5cf6", {}),
    ],
    M.PROJECT: [
        (K.STATUS, "Not Started", "#6b7280", {"is_system": True}),
        (K.STATUS, "In Progress", "#3b82f6", {"is_system": True, "is_default": True}),
        (K.STATUS, "On Hold", "#f97316", {"is_system": True}),
        (K.STATUS, "Completed", "#22c55e", {"is_system": True}),
        (K.STATUS, "Cancelled", "#ef4444", {"is_system": True}),
    ],
    M.TICKET: [
        (K.QUEUE, "Tier 1 Support", "#3b82f6", {"is_default": True}),
        (K.QUEUE, "Network Ops", "#10b981", {}),
        (K.QUEUE, "Billing", "#f59e0b", {}),
        (K.QUEUE, "Unassigned", "#6b7280", {"is_system": True}),
        (K.STATUS, "Open", "#3b82f6", {"is_system": True, "is_default": True, "metadata": {"status_type": "Open"}}),
        (K.STATUS, "In Progress", "#f97316", {"metadata": {"status_type": "Open"}}),
        (K.STATUS, "On Hold", "#a855f7", {"metadata": {"status_type": "Pending"}}),
        (K.STATUS, "Resolved", "#22c55e", {"metadata": {"status_type": "Closed"}}),
        (K.STATUS, "Closed", "#6b7280", {"is_system": True, "metadata": {"status_type": "Closed"}}),
        (K.PRIORITY, "Low", "#6b7280", {
            "metadata": {"level": 1, "response_sla_minutes": 1440, "resolution_sla_minutes": 7200},
        }),
        (K.PRIORITY, "Medium", "#3b82f6", {
            "is_default": True,
            "metadata": {"level": 2, "response_sla_minutes": 480, "resolution_sla_minutes": 4320},
        }),
        (K.PRIORITY, "High", "#f97316", {
            "metadata": {"level": 3, "response_sla_minutes": 240, "resolution_sla_minutes": 1440},
        }),
        (K.PRIORITY, "Critical", "#ef4444", {
            "metadata": {"level": 4, "response_sla_minutes": 60, "resolution_sla_minutes": 480},
        }),
    ],
}


def default_settings_for(module: str) -> list[dict]:
    rows = []
    for order, (kind, name, color, extra) in enumerate(DEFAULT_SETTINGS.get(module, [])):
        rows.append(
            {
                "kind": str(kind),
                "name": name,
                "color": color,
                "sort_order": order,
                "description": extra.get("description", ""),
                "is_default": extra.get("is_default", False),
                "is_system": extra.get("is_system", False),
                "metadata": dict(extra.get("metadata", {})),
            }
        )
    return rows
