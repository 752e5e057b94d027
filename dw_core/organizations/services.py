# backend/dw_core/organizations/services.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import ValidationError

from dw_core.audit.services import AuditService
from dw_core.organizations.defaults import MODULE_IDS, MSP_MODULES
from dw_core.organizations.models import BillingCycle, Organization, SubscriptionStatus, SubscriptionTier
from dw_core.organizations.selectors import get_organization_by_workos_id_or_none, is_subdomain_available

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupResult:
    organization: Organization
    created: bool


def _org_name_from_email(email: str) -> str:
    local, _, domain = email.partition("@")
    label = domain.split(".")[0] if domain else ""
    if label:
        return label[:1].upper() + label[1:]
    return f"{local}'s Organization"


class OrganizationService:
    """
    All Organization mutations live here (write-model boundary).
    """

    UPDATABLE_FIELDS = {
        "name",
        "time_zone",
        "is_internal_it_mode",
        "subscription_tier",
        "subscription_status",
        "billing_cycle",
    }
    MERGED_JSON_FIELDS = {"features", "settings"}

    @staticmethod
    def generate_subdomain(name: str) -> str:
        base = re.sub(r"[^a-z0-9\s-]", "", (name or "").lower())
        base = re.sub(r"\s+", "-", base.strip())[:20].strip("-") or "org"

        candidate = base
        n = 1
        while not is_subdomain_available(subdomain=candidate):
            n += 1
            candidate = f"{base}-{n}"
        return candidate

    @staticmethod
    @transaction.atomic
    def create(
        *,
        name: str,
        workos_org_id: str = "",
        time_zone: str = "UTC",
        is_internal_it_mode: bool = False,
        actor_user_id: int | None = None,
    ) -> Organization:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})

        org = Organization(
            name=name,
            workos_org_id=workos_org_id or "",
            subdomain=OrganizationService.generate_subdomain(name),
            time_zone=time_zone or "UTC",
            is_internal_it_mode=is_internal_it_mode,
        )
        if is_internal_it_mode:
            org.enabled_modules = {**org.enabled_modules, **{m: False for m in MSP_MODULES}}
        org.save()

        AuditService.log(
            event_code="organization.created",
            entity_type="Organization",
            entity_id=org.id,
            org_id=org.id,
            actor_user_id=actor_user_id,
            metadata={"subdomain": org.subdomain},
        )
        logger.info("Organization created id=%s subdomain=%s", org.id, org.subdomain)
        return org

    @staticmethod
    @transaction.atomic
    def update(*, org_id: UUID, data: dict, actor_user_id: int | None) -> Organization:
        org = Organization.objects.select_for_update().get(id=org_id, is_deleted=False)

        changed: list[str] = []
        for k, v in (data or {}).items():
            if k in OrganizationService.UPDATABLE_FIELDS:
                setattr(org, k, v)
                changed.append(k)
            elif k in OrganizationService.MERGED_JSON_FIELDS:
                if not isinstance(v, dict):
                    raise ValidationError({k: "Must be a JSON object."})
                setattr(org, k, {**(getattr(org, k) or {}), **v})
                changed.append(k)

        if "subscription_tier" in changed and org.subscription_tier not in SubscriptionTier.values:
            raise ValidationError({"subscription_tier": f"Invalid tier. Allowed: {list(SubscriptionTier.values)}"})
        if "subscription_status" in changed and org.subscription_status not in SubscriptionStatus.values:
            raise ValidationError(
                {"subscription_status": f"Invalid status. Allowed: {list(SubscriptionStatus.values)}"}
            )
        if "billing_cycle" in changed and org.billing_cycle not in BillingCycle.values:
            raise ValidationError({"billing_cycle": f"Invalid cycle. Allowed: {list(BillingCycle.values)}"})

        if "is_internal_it_mode" in changed and org.is_internal_it_mode:
            org.enabled_modules = {**(org.enabled_modules or {}), **{m: False for m in MSP_MODULES}}
            changed.append("enabled_modules")

        if not changed:
            return org

        org.save(update_fields=sorted(set(changed)) + ["updated_at"])

        AuditService.log(
            event_code="organization.updated",
            entity_type="Organization",
            entity_id=org.id,
            org_id=org.id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(set(changed))},
        )
        return org

    @staticmethod
    @transaction.atomic
    def update_enabled_modules(
        *,
        org_id: UUID,
        enabled_modules,
        actor_user_id: int | None,
        is_internal_it_mode: Optional[bool] = None,
    ) -> Organization:
        if not isinstance(enabled_modules, dict):
            raise ValidationError({"enabled_modules": "Must be an object of module id -> boolean."})

        unknown = sorted(k for k in enabled_modules if k not in MODULE_IDS)
        if unknown:
            raise ValidationError(
                {"enabled_modules": f"Unknown module(s): {', '.join(unknown)}. Allowed: {', '.join(MODULE_IDS)}."}
            )

        not_bool = sorted(k for k, v in enabled_modules.items() if not isinstance(v, bool))
        if not_bool:
            raise ValidationError({"enabled_modules": f"Values must be booleans: {', '.join(not_bool)}."})

        org = Organization.objects.select_for_update().get(id=org_id, is_deleted=False)

        internal = org.is_internal_it_mode if is_internal_it_mode is None else bool(is_internal_it_mode)
        if internal:
            blocked = sorted(m for m in MSP_MODULES if enabled_modules.get(m))
            if blocked:
                raise ValidationError(
                    {"enabled_modules": f"Not available in Internal IT mode: {', '.join(blocked)}."}
                )

        modules = {**(org.enabled_modules or {}), **enabled_modules}
        if internal:
            modules.update({m: False for m in MSP_MODULES})

        org.enabled_modules = modules
        org.is_internal_it_mode = internal
        org.save(update_fields=["enabled_modules", "is_internal_it_mode", "updated_at"])

        AuditService.log(
            event_code="organization.modules_updated",
            entity_type="Organization",
            entity_id=org.id,
            org_id=org.id,
            actor_user_id=actor_user_id,
            metadata={"enabled_modules": modules, "is_internal_it_mode": internal},
        )
        return org

    @staticmethod
    @transaction.atomic
    def bootstrap_for_user(*, user, workos_org_id: str = "") -> SetupResult:
        """
        First sign-in: make sure the user belongs to an organization.

        - Existing active membership: returned unchanged.
        - Known external org id: the user joins it as read-only.
        - Otherwise: a new organization is created and the user becomes its admin.
        """
        from dw_core.iam.models import OrganizationMembership, UserProfile
        from dw_core.iam.services.membership import primary_membership
        from dw_core.iam.services.roles import ensure_default_roles

        email = (getattr(user, "email", "") or "").strip()
        if not email:
            raise ValidationError("User email is required")

        existing = primary_membership(user.id)
        if existing is not None:
            return SetupResult(organization=existing.organization, created=False)

        org = get_organization_by_workos_id_or_none(workos_org_id=workos_org_id)
        created = org is None
        if created:
            org = OrganizationService.create(
                name=_org_name_from_email(email),
                workos_org_id=workos_org_id,
                actor_user_id=user.id,
            )

        roles = ensure_default_roles(org)

        profile, _ = UserProfile.objects.get_or_create(user=user, defaults={"organization": org})
        if profile.organization_id is None:
            profile.organization = org
            profile.save(update_fields=["organization", "updated_at"])

        OrganizationMembership.objects.create(
            organization=org,
            user_profile=profile,
            role=roles["admin"] if created else roles["readonly"],
            is_active=True,
            is_primary=True,
        )

        logger.info("User %s set up in organization %s (created=%s)", user.id, org.id, created)
        return SetupResult(organization=org, created=created)
