# backend/dw_core/common/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OrgScopedModel(TimeStampedModel):
    """
    Enforces organization scope at the data layer.
    (Middleware enforces request scope; this enforces persistence scope.)
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    org_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(is_deleted=False)

    def deleted(self):
        return self.filter(is_deleted=True)


class SoftDeleteModel(OrgScopedModel):
    """
    Org-scoped entity that is never physically removed by the API.

    Readers go through `objects.alive()`; the row stays in storage with
    is_deleted=True after a delete.
    """
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    def mark_deleted(self, *, actor_user_id: int | None) -> list[str]:
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.updated_by_id = actor_user_id
        return ["is_deleted", "deleted_at", "updated_by", "updated_at"]

    def mark_restored(self, *, actor_user_id: int | None) -> list[str]:
        self.is_deleted = False
        self.deleted_at = None
        self.updated_by_id = actor_user_id
        return ["is_deleted", "deleted_at", "updated_by", "updated_at"]


# -------------------------------------------------------------------
# ✅ Durable idempotency
# -------------------------------------------------------------------

class IdempotencyRecord(TimeStampedModel):
    """
    Stores idempotent responses durably.

    Keyed by:
      (org_id, user_id, method, path, idempotency_key)

    A retried POST with the same key replays the stored response instead of
    running the write again (e.g. inventory deploy must not double-decrement).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    org_id = models.UUIDField(db_index=True)

    # request identity
    user_id = models.BigIntegerField(db_index=True)
    method = models.CharField(max_length=16, db_index=True)
    path = models.CharField(max_length=255, db_index=True)
    idempotency_key = models.CharField(max_length=255, db_index=True)

    # reserved by an in-flight request, no response stored yet
    is_pending = models.BooleanField(default=False)

    # stored response
    status_code = models.PositiveIntegerField(default=200)
    response_data = models.JSONField(default=dict)

    class Meta:
        db_table = "common_idempotency_record"
        constraints = [
            models.UniqueConstraint(
                fields=["org_id", "user_id", "method", "path", "idempotency_key"],
                name="uq_idempo_org_user_method_path_key",
            )
        ]
        indexes = [
            models.Index(fields=["org_id", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.method} {self.path} {self.idempotency_key}"
