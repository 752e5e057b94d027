# backend/dw_core/quotes/models.py
from django.db import models

from dw_core.common.models import SoftDeleteModel


class QuoteStatus(models.TextChoices):
    DRAFT = "Draft", "Draft"
    SENT = "Sent", "Sent"
    ACCEPTED = "Accepted", "Accepted"
    REJECTED = "Rejected", "Rejected"


class Quote(SoftDeleteModel):
    subject = models.CharField(max_length=255)
    client_name = models.CharField(max_length=255, db_index=True)
    # reference into the client directory; free-form since clients live outside this backend
    client_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    status = models.CharField(max_length=16, choices=QuoteStatus.choices, default=QuoteStatus.DRAFT, db_index=True)
    expiry_date = models.DateField(null=True, blank=True)

    # [{description, quantity, unit_price, amount}]
    line_items = models.JSONField(default=list, blank=True)
    total = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta:
        db_table = "quotes_quote"
        indexes = [
            models.Index(fields=["org_id", "is_deleted", "created_at"]),
            models.Index(fields=["org_id", "status"]),
        ]

    def __str__(self) -> str:
        return self.subject
