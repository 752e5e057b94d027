# backend/dw_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import SAFE_METHODS, BasePermission

from dw_core.iam.scope import require_org_context

# Role codes (Django auth Group names or OrganizationMembership.role.code, upper-cased)
ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_TECHNICIAN = "TECHNICIAN"
ROLE_READONLY = "READONLY"

ALL_ROLES = {ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN, ROLE_READONLY}
STAFF_ROLES = {ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN}
LEAD_ROLES = {ROLE_ADMIN, ROLE_MANAGER}


def _user_roles(user, org_id=None) -> Set[str]:
    """
    Resolve roles from:
    1) Django groups: user.groups
    2) the user's membership role in the active organization

    Authenticated users without any role are treated as READONLY.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    if org_id is not None:
        from dw_core.iam.services.membership import membership_role_code

        code = membership_role_code(user_id=user.id, org_id=org_id)
        if code:
            roles.add(code.upper())

    if not roles:
        roles.add(ROLE_READONLY)

    return roles


class BaseRolePermission(BasePermission):
    """
    Role-based access control for org-scoped endpoints.

    - Requires authentication (401 otherwise).
    - Resolves the organization context (400 missing/invalid header, 403 non-member).
    - ADMIN bypass.
    - Uses allowed_roles_per_action; unknown SAFE actions fall back to list/retrieve.
    """
    message = "You do not have permission to perform this action."

    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": STAFF_ROLES,
        "update": STAFF_ROLES,
        "partial_update": STAFF_ROLES,
        "destroy": LEAD_ROLES,
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        ctx = require_org_context(request)
        roles = _user_roles(user, ctx.org_id)

        if ROLE_ADMIN in roles:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            allowed = self.allowed_roles_per_action.get("retrieve" if is_detail else "list")

        if allowed is not None:
            return bool(roles & allowed)

        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class OrgMemberPermission(BaseRolePermission):
    """Any member of the organization, any action."""
    allowed_roles_per_action = {}

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False
        require_org_context(request)
        return True


class SettingsPermission(BaseRolePermission):
    """Settings registries and custom field definitions"""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "stats": ALL_ROLES,
        "create": LEAD_ROLES,
        "update": LEAD_ROLES,
        "partial_update": LEAD_ROLES,
        "destroy": LEAD_ROLES,
        "initialize": LEAD_ROLES,
    }


class AssetPermission(BaseRolePermission):
    allowed_roles_per_action = {
        **BaseRolePermission.allowed_roles_per_action,
        "restore": LEAD_ROLES,
        "activity": STAFF_ROLES,
        "tickets": STAFF_ROLES,
        "maintenance": STAFF_ROLES,
        "stats": ALL_ROLES,
    }


class InventoryPermission(BaseRolePermission):
    allowed_roles_per_action = {
        **BaseRolePermission.allowed_roles_per_action,
        "restore": LEAD_ROLES,
        "adjust": STAFF_ROLES,
        "deploy": STAFF_ROLES,
        "deploy_asset": STAFF_ROLES,
        "movements": ALL_ROLES,
        "all_movements": ALL_ROLES,
        "low_stock": ALL_ROLES,
        "out_of_stock": ALL_ROLES,
        "stats": ALL_ROLES,
    }


class ChangeRequestPermission(BaseRolePermission):
    allowed_roles_per_action = {
        **BaseRolePermission.allowed_roles_per_action,
        "approve": LEAD_ROLES,
        "reject": LEAD_ROLES,
        "approvals": ALL_ROLES,
        "links": ALL_ROLES,
        "stats": ALL_ROLES,
        "upcoming": ALL_ROLES,
    }


class TicketPermission(BaseRolePermission):
    allowed_roles_per_action = {
        **BaseRolePermission.allowed_roles_per_action,
        "activity": STAFF_ROLES,
        "stats": ALL_ROLES,
    }


class ProjectPermission(BaseRolePermission):
    allowed_roles_per_action = {
        **BaseRolePermission.allowed_roles_per_action,
        "stats": ALL_ROLES,
        "upcoming": ALL_ROLES,
    }


class QuotePermission(BaseRolePermission):
    allowed_roles_per_action = {
        **BaseRolePermission.allowed_roles_per_action,
        "set_status": LEAD_ROLES,
        "stats": ALL_ROLES,
    }


class OrganizationAdminPermission(BaseRolePermission):
    """Organization profile + module toggles"""
    allowed_roles_per_action = {
        "get": ALL_ROLES,
        "put": {ROLE_ADMIN},
        "patch": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        return request.method.lower()


class AuditPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": LEAD_ROLES,
        "retrieve": LEAD_ROLES,
    }
