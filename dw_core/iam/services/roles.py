# backend/dw_core/iam/services/roles.py
from __future__ import annotations

from dw_core.iam.models import Role

# (code, name); codes upper-cased are the permission layer's role names
DEFAULT_ROLES = (
    ("admin", "Administrator"),
    ("manager", "Service Manager"),
    ("technician", "Technician"),
    ("readonly", "Read Only"),
)


def ensure_default_roles(organization) -> dict[str, Role]:
    """Idempotent: returns {code: Role} for the organization's built-in roles."""
    roles: dict[str, Role] = {}
    for code, name in DEFAULT_ROLES:
        role, _ = Role.objects.get_or_create(
            organization=organization,
            code=code,
            defaults={"name": name, "is_active": True},
        )
        roles[code] = role
    return roles
