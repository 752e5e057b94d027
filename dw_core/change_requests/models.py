# backend/dw_core/change_requests/models.py
from django.conf import settings
from django.db import models

from dw_core.common.models import OrgScopedModel, SoftDeleteModel


class ChangeStatus(models.TextChoices):
    PENDING_APPROVAL = "Pending Approval", "Pending Approval"
    APPROVED = "Approved", "Approved"
    IN_PROGRESS = "In Progress", "In Progress"
    COMPLETED = "Completed", "Completed"
    REJECTED = "Rejected", "Rejected"
    CANCELLED = "Cancelled", "Cancelled"


class RiskLevel(models.TextChoices):
    LOW = "Low", "Low"
    MEDIUM = "Medium", "Medium"
    HIGH = "High", "High"
    CRITICAL = "Critical", "Critical"


class ImpactLevel(models.TextChoices):
    LOW = "Low", "Low"
    MEDIUM = "Medium", "Medium"
    HIGH = "High", "High"


class ChangeRequest(SoftDeleteModel):
    title = models.CharField(max_length=255)
    description = models.TextField()
    client = models.CharField(max_length=255, db_index=True)

    # name from the change_management category settings
    category = models.CharField(max_length=128, blank=True, default="")

    status = models.CharField(
        max_length=32,
        choices=ChangeStatus.choices,
        default=ChangeStatus.PENDING_APPROVAL,
        db_index=True,
    )
    risk_level = models.CharField(max_length=16, choices=RiskLevel.choices, default=RiskLevel.MEDIUM)
    impact = models.CharField(max_length=16, choices=ImpactLevel.choices, default=ImpactLevel.MEDIUM)

    planned_start_date = models.DateTimeField(db_index=True)
    planned_end_date = models.DateTimeField()
    actual_start_date = models.DateTimeField(null=True, blank=True)
    actual_end_date = models.DateTimeField(null=True, blank=True)

    submitted_by = models.CharField(max_length=255)
    change_plan = models.TextField(blank=True, default="")
    rollback_plan = models.TextField(blank=True, default="")
    test_plan = models.TextField(blank=True, default="")

    # [AssetId], [TicketId]
    associated_assets = models.JSONField(default=list, blank=True)
    associated_tickets = models.JSONField(default=list, blank=True)

    approved_by = models.CharField(max_length=255, blank=True, default="")
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.CharField(max_length=255, blank=True, default="")
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    # copied from the category / risk settings at write time
    risk_score = models.PositiveIntegerField(default=0)
    requires_approval = models.BooleanField(default=True)
    requires_testing = models.BooleanField(default=False)
    requires_rollback_plan = models.BooleanField(default=False)

    class Meta:
        db_table = "change_requests_change_request"
        indexes = [
            models.Index(fields=["org_id", "is_deleted", "created_at"]),
            models.Index(fields=["org_id", "status", "planned_start_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"


class ApprovalDecision(models.TextChoices):
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class ChangeApproval(OrgScopedModel):
    """
    One row per approve/reject decision. Kept when the change request is soft-deleted.
    """
    change_request = models.ForeignKey(ChangeRequest, on_delete=models.PROTECT, related_name="approvals")

    approver = models.CharField(max_length=255)
    approver_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    decision = models.CharField(max_length=16, choices=ApprovalDecision.choices)
    reason = models.TextField(blank=True, default="")
    decided_at = models.DateTimeField(db_index=True)

    class Meta:
        db_table = "change_requests_approval"
        ordering = ["-decided_at"]
        indexes = [
            models.Index(fields=["org_id", "change_request", "decided_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.decision} by {self.approver}"
