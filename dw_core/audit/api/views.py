# backend/dw_core/audit/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from dw_core.audit.api.serializers import AuditEventSerializer
from dw_core.audit.models import AuditEvent
from dw_core.audit.selectors import list_audit_events
from dw_core.common.api.pagination import parse_limit
from dw_core.common.permissions import AuditPermission
from dw_core.iam.scope import require_org_context


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Org-scoped audit timeline.
    """
    permission_classes = [AuditPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        operation_id="v1_audit_events_list",
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY,
                             required=False, description="Filter by entity type (e.g. Asset, ChangeRequest)."),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY,
                             required=False, description="Filter by entity UUID."),
            OpenApiParameter(name="event_code", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY,
                             required=False, description="Filter by event code (e.g. inventory.deployed)."),
            OpenApiParameter(name="actor_user_id", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY,
                             required=False, description="Filter by actor user id."),
            OpenApiParameter(name="limit", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY,
                             required=False, description="Max records to return (default 200, max 500)."),
        ],
    )
    def list(self, request):
        ctx = require_org_context(request)
        params = request.query_params

        entity_id = None
        if params.get("entity_id"):
            try:
                entity_id = UUID(str(params["entity_id"]))
            except ValueError:
                raise ValidationError({"entity_id": "Invalid UUID."})

        actor_user_id = None
        if params.get("actor_user_id"):
            try:
                actor_user_id = int(params["actor_user_id"])
            except ValueError:
                raise ValidationError({"actor_user_id": "Invalid integer."})

        qs = list_audit_events(
            org_id=ctx.org_id,
            entity_type=params.get("entity_type") or None,
            entity_id=entity_id,
            event_code=params.get("event_code") or None,
            actor_user_id=actor_user_id,
        )

        limit_n = parse_limit(params.get("limit"), default=200, maximum=500)
        return Response(AuditEventSerializer(qs[:limit_n], many=True).data, status=status.HTTP_200_OK)
