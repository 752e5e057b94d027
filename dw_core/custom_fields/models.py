# backend/dw_core/custom_fields/models.py
from django.db import models

from dw_core.common.models import SoftDeleteModel


class CustomFieldModule(models.TextChoices):
    TICKETS = "Tickets", "Tickets"
    ASSETS = "Assets", "Assets"
    CLIENTS = "Clients", "Clients"


class CustomFieldType(models.TextChoices):
    TEXT = "Text", "Text"
    TEXTAREA = "Textarea", "Textarea"
    NUMBER = "Number", "Number"
    CHECKBOX = "Checkbox", "Checkbox"
    DATE = "Date", "Date"
    DROPDOWN = "Dropdown", "Dropdown"


class CustomField(SoftDeleteModel):
    """
    Definition of an extra field on tickets, assets or clients.
    Values live in the entity's `custom_fields` JSON column, keyed by `key`.
    """
    module = models.CharField(max_length=16, choices=CustomFieldModule.choices, db_index=True)

    name = models.CharField(max_length=128)
    key = models.SlugField(max_length=64)
    field_type = models.CharField(max_length=16, choices=CustomFieldType.choices, default=CustomFieldType.TEXT)
    required = models.BooleanField(default=False)
    options = models.JSONField(default=list, blank=True)  # Dropdown only
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "custom_fields_custom_field"
        constraints = [
            models.UniqueConstraint(
                fields=["org_id", "module", "key"],
                condition=models.Q(is_deleted=False),
                name="uq_custom_field_live_key",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.module}.{self.key}"
