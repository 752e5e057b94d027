# backend/dw_core/iam/services/membership.py
from __future__ import annotations

from uuid import UUID

from dw_core.iam.models import OrganizationMembership


def _active_memberships(user_id: int):
    return OrganizationMembership.objects.filter(
        user_profile__user_id=user_id,
        user_profile__is_active=True,
        is_active=True,
        organization__is_deleted=False,
    )


def list_user_organizations(user_id: int) -> list[dict]:
    """
    Return organization memberships for the /me response.

    Membership graph:
      auth_user -> UserProfile -> OrganizationMembership -> Organization
    """
    qs = (
        _active_memberships(user_id)
        .select_related("organization", "role")
        .order_by("-is_primary", "organization__name")
    )

    return [
        {
            "org_id": str(m.organization_id),
            "org_name": m.organization.name,
            "subdomain": m.organization.subdomain,
            "role_code": m.role.code,
            "role_name": m.role.name,
            "is_primary": bool(m.is_primary),
        }
        for m in qs
    ]


def primary_membership(user_id: int) -> OrganizationMembership | None:
    return (
        _active_memberships(user_id)
        .select_related("organization", "role")
        .order_by("-is_primary", "created_at")
        .first()
    )


def is_user_member_of_org(*, user_id: int, org_id: UUID) -> bool:
    """
    Validate user -> organization membership.
    Single source of truth used by scope enforcement.
    """
    return _active_memberships(user_id).filter(organization_id=org_id).exists()


def membership_role_code(*, user_id: int, org_id: UUID) -> str | None:
    return (
        _active_memberships(user_id)
        .filter(organization_id=org_id, role__is_active=True)
        .values_list("role__code", flat=True)
        .first()
    )
