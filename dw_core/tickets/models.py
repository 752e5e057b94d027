# backend/dw_core/tickets/models.py
from django.db import models

from dw_core.common.models import SoftDeleteModel

# used when the organization has no ticket settings of that kind
FALLBACK_STATUS = "Open"
FALLBACK_PRIORITY = "Medium"
FALLBACK_QUEUE = "Unassigned"


class Ticket(SoftDeleteModel):
    subject = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    client = models.CharField(max_length=255, db_index=True)
    assignee = models.CharField(max_length=255, blank=True, default="", db_index=True)

    # names from the ticket settings registry
    priority = models.CharField(max_length=128, default=FALLBACK_PRIORITY, db_index=True)
    status = models.CharField(max_length=128, default=FALLBACK_STATUS, db_index=True)
    queue = models.CharField(max_length=128, default=FALLBACK_QUEUE, db_index=True)

    # [{timestamp, user, activity}], newest first
    activity = models.JSONField(default=list, blank=True)
    # [AssetId]
    associated_assets = models.JSONField(default=list, blank=True)
    # {priority, response_sla_minutes, resolution_sla_minutes, response_due_at, resolution_due_at}
    sla = models.JSONField(default=dict, blank=True)
    custom_fields = models.JSONField(default=dict, blank=True)

    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "tickets_ticket"
        indexes = [
            models.Index(fields=["org_id", "is_deleted", "created_at"]),
            models.Index(fields=["org_id", "status", "priority"]),
        ]

    def __str__(self) -> str:
        return self.subject
