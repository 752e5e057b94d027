# backend/dw_core/projects/models.py
from django.db import models

from dw_core.common.models import SoftDeleteModel


class ProjectStatus(models.TextChoices):
    NOT_STARTED = "Not Started", "Not Started"
    IN_PROGRESS = "In Progress", "In Progress"
    ON_HOLD = "On Hold", "On Hold"
    COMPLETED = "Completed", "Completed"
    CANCELLED = "Cancelled", "Cancelled"


class Project(SoftDeleteModel):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    client = models.CharField(max_length=255, db_index=True)
    status = models.CharField(
        max_length=16,
        choices=ProjectStatus.choices,
        default=ProjectStatus.NOT_STARTED,
        db_index=True,
    )

    start_date = models.DateField(db_index=True)
    end_date = models.DateField()
    actual_start_date = models.DateTimeField(null=True, blank=True)
    actual_end_date = models.DateTimeField(null=True, blank=True)

    budget_total = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    budget_used = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    progress = models.PositiveSmallIntegerField(default=0)  # 0-100

    team_members = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "projects_project"
        indexes = [
            models.Index(fields=["org_id", "is_deleted", "created_at"]),
            models.Index(fields=["org_id", "status", "start_date"]),
        ]

    def __str__(self) -> str:
        return self.name
