# backend/dw_core/audit/models.py
from django.conf import settings
from django.db import models

from dw_core.common.models import OrgScopedModel


class AuditEvent(OrgScopedModel):
    """
    Immutable audit record: who changed which entity, when, and how.
    Change request approvals, stock movements and deployments all leave one.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "change_request.approved"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "ChangeRequest"
    entity_id = models.UUIDField(db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["org_id", "occurred_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["org_id", "event_code"]),
        ]
