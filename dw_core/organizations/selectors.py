# backend/dw_core/organizations/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from dw_core.common.api.exceptions import NotFoundError
from dw_core.organizations.models import Organization


def get_organization(*, org_id: UUID) -> Organization:
    org = Organization.objects.filter(id=org_id, is_deleted=False).first()
    if org is None:
        raise NotFoundError("Organization not found.")
    return org


def get_organization_by_workos_id_or_none(*, workos_org_id: str) -> Optional[Organization]:
    if not workos_org_id:
        return None
    return Organization.objects.filter(workos_org_id=workos_org_id, is_deleted=False).first()


def is_subdomain_available(*, subdomain: str) -> bool:
    return not Organization.objects.filter(subdomain=subdomain).exists()
