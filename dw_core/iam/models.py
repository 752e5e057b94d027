# backend/dw_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models

from dw_core.organizations.models import Organization


class Role(models.Model):
    """
    Role is organization-scoped (each org can define its own roles).
    Codes map onto the permission layer's role names (admin, manager, technician, readonly).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(Organization, on_delete=models.PROTECT, related_name="roles")

    name = models.CharField(max_length=128)
    code = models.SlugField(max_length=64)  # unique per organization

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_role"
        constraints = [
            models.UniqueConstraint(fields=["organization", "code"], name="uq_role_org_code"),
        ]
        indexes = [
            models.Index(fields=["organization", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.code}"


class UserProfile(models.Model):
    """
    Deskwise profile anchored to Django's AUTH_USER_MODEL.
    `organization` is the org the user signed up into (home org).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="dw_profile")
    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="user_profiles",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_user_profile"

    def __str__(self) -> str:
        return f"{self.user.username}"


class OrganizationMembership(models.Model):
    """
    Assigns a user to an organization with a role.
    This is the membership graph the request-context resolver checks.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(Organization, on_delete=models.PROTECT, related_name="memberships")
    user_profile = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="memberships")
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="memberships")

    is_active = models.BooleanField(default=True)
    is_primary = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "iam_organization_membership"
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "user_profile"],
                name="uq_org_user_profile_membership",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "is_active"]),
        ]
