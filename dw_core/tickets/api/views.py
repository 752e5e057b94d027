# backend/dw_core/tickets/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.common.api.pagination import paginate
from dw_core.common.filters import filter_entities
from dw_core.common.permissions import TicketPermission
from dw_core.iam.scope import require_org_context
from dw_core.tickets.api.serializers import (
    TicketActivitySerializer,
    TicketSerializer,
    TicketStatsSerializer,
    TicketWriteSerializer,
)
from dw_core.tickets.filters import TicketFilter
from dw_core.tickets.models import Ticket
from dw_core.tickets.services import TicketService, ticket_repo


def _q(name: str, typ=OpenApiTypes.STR, description: str = "") -> OpenApiParameter:
    return OpenApiParameter(name=name, type=typ, location=OpenApiParameter.QUERY, required=False, description=description)


LIST_PARAMS = [
    _q("status", description="Comma-separated status names"),
    _q("priority", description="Comma-separated priority names"),
    _q("queue", description="Comma-separated queue names"),
    _q("assignee"),
    _q("client", description="Case-insensitive substring"),
    _q("include_deleted", OpenApiTypes.BOOL),
    _q("search", description="Subject, description, client or assignee"),
]


@extend_schema_view(
    list=extend_schema(tags=["Tickets"], operation_id="v1_tickets_list", parameters=LIST_PARAMS,
                       responses={200: TicketSerializer(many=True)}),
    create=extend_schema(tags=["Tickets"], operation_id="v1_tickets_create",
                         request=TicketWriteSerializer, responses={201: TicketSerializer}),
    retrieve=extend_schema(tags=["Tickets"], operation_id="v1_tickets_retrieve", responses={200: TicketSerializer}),
    update=extend_schema(tags=["Tickets"], operation_id="v1_tickets_update",
                         request=TicketWriteSerializer, responses={200: TicketSerializer}),
    partial_update=extend_schema(tags=["Tickets"], operation_id="v1_tickets_partial_update",
                                 request=TicketWriteSerializer, responses={200: TicketSerializer}),
    destroy=extend_schema(tags=["Tickets"], operation_id="v1_tickets_destroy", responses={204: None}),
)
class TicketViewSet(viewsets.ViewSet):
    permission_classes = [TicketPermission]

    # ✅ critical for drf-spectacular
    serializer_class = TicketSerializer
    queryset = Ticket.objects.none()

    def list(self, request):
        ctx = require_org_context(request)
        qs = filter_entities(request, repo=ticket_repo, org_id=ctx.org_id, filterset_class=TicketFilter)
        return paginate(request, qs, TicketSerializer)

    def create(self, request):
        ctx = require_org_context(request)

        ser = TicketWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = TicketService.create(
            org_id=ctx.org_id,
            actor_user_id=request.user.id,
            data=dict(ser.validated_data),
            performed_by=request.user.get_username(),
        )
        return Response(TicketSerializer(obj).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = TicketService.get(org_id=ctx.org_id, ticket_id=pk)
        return Response(TicketSerializer(obj).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = TicketWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = TicketService.update(
            org_id=ctx.org_id,
            ticket_id=pk,
            actor_user_id=request.user.id,
            data=dict(ser.validated_data),
            performed_by=request.user.get_username(),
        )
        return Response(TicketSerializer(obj).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        TicketService.delete(org_id=ctx.org_id, ticket_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Tickets"], operation_id="v1_tickets_activity_create",
                   request=TicketActivitySerializer, responses={201: TicketSerializer})
    @action(detail=True, methods=["post"], url_path="activity")
    def activity(self, request, pk=None):
        ctx = require_org_context(request)

        ser = TicketActivitySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = TicketService.add_activity(
            org_id=ctx.org_id,
            ticket_id=pk,
            activity=ser.validated_data["activity"],
            user=request.user.get_username(),
        )
        return Response(TicketSerializer(obj).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Tickets"], operation_id="v1_tickets_stats", responses={200: TicketStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(TicketService.stats(org_id=ctx.org_id), status=status.HTTP_200_OK)
