# backend/dw_core/organizations/models.py
import uuid

from django.db import models

from dw_core.organizations.defaults import default_enabled_modules, default_features, default_settings


class SubscriptionTier(models.TextChoices):
    STARTER = "starter", "Starter"
    PROFESSIONAL = "professional", "Professional"
    ENTERPRISE = "enterprise", "Enterprise"


class SubscriptionStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    TRIAL = "trial", "Trial"
    SUSPENDED = "suspended", "Suspended"
    CANCELLED = "cancelled", "Cancelled"


class BillingCycle(models.TextChoices):
    MONTHLY = "monthly", "Monthly"
    YEARLY = "yearly", "Yearly"


class Organization(models.Model):
    """
    Tenant root. Every org-scoped row carries this id as `org_id`.
    NOT an OrgScopedModel (it *is* the organization).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # external identity provider org id; blank for orgs created locally
    workos_org_id = models.CharField(max_length=128, blank=True, default="", db_index=True)

    name = models.CharField(max_length=255)
    subdomain = models.SlugField(max_length=32, unique=True)
    time_zone = models.CharField(max_length=64, default="UTC")

    is_internal_it_mode = models.BooleanField(default=False)
    enabled_modules = models.JSONField(default=default_enabled_modules, blank=True)
    features = models.JSONField(default=default_features, blank=True)
    settings = models.JSONField(default=default_settings, blank=True)

    subscription_tier = models.CharField(
        max_length=16,
        choices=SubscriptionTier.choices,
        default=SubscriptionTier.STARTER,
    )
    subscription_status = models.CharField(
        max_length=16,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.TRIAL,
        db_index=True,
    )
    billing_cycle = models.CharField(max_length=16, choices=BillingCycle.choices, default=BillingCycle.MONTHLY)

    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "organizations_organization"
        indexes = [
            models.Index(fields=["subscription_status"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.subdomain})"
