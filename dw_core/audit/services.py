# backend/dw_core/audit/services.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from dw_core.audit.models import AuditEvent


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    org_id: UUID
    actor_user_id: int | None
    metadata: Dict[str, Any]


def _clean_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    # dates/decimals/UUIDs in metadata are stored in their JSON string form
    return json.loads(json.dumps(metadata or {}, cls=DjangoJSONEncoder))


class AuditService:
    """
    Central audit writer. Persists into AuditEvent (immutable).
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        org_id: UUID,
        actor_user_id: int | None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        metadata = _clean_metadata(metadata)

        AuditEvent.objects.create(
            org_id=org_id,
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )

        return AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            org_id=org_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )
