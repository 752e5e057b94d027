# backend/dw_core/assets/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.assets.api.serializers import (
    ActivityCreateSerializer,
    AssetSerializer,
    AssetStatsSerializer,
    AssetWriteSerializer,
    MaintenanceRecordCreateSerializer,
    MaintenanceRecordSerializer,
    TicketLinkSerializer,
)
from dw_core.assets.filters import AssetFilter
from dw_core.assets.models import Asset
from dw_core.assets.services import AssetService, asset_repo
from dw_core.common.api.pagination import paginate
from dw_core.common.filters import filter_entities
from dw_core.common.permissions import AssetPermission
from dw_core.iam.scope import require_org_context


def _q(name: str, typ=OpenApiTypes.STR, description: str = "") -> OpenApiParameter:
    return OpenApiParameter(name=name, type=typ, location=OpenApiParameter.QUERY, required=False, description=description)


LIST_PARAMS = [
    _q("type", description="Comma-separated: Server,Workstation,Network,Printer"),
    _q("status", description="Comma-separated: Online,Offline,Warning"),
    _q("category", description="Comma-separated category names"),
    _q("is_secure", OpenApiTypes.BOOL),
    _q("client", description="Case-insensitive substring"),
    _q("location", description="Case-insensitive substring"),
    _q("maintenance_due", OpenApiTypes.BOOL, "next_maintenance_date on or before today"),
    _q("warranty_expiring", OpenApiTypes.INT, "Warranty ends within N days"),
    _q("include_deleted", OpenApiTypes.BOOL),
    _q("search", description="Name, client, IP, MAC, OS or CPU model"),
]


@extend_schema_view(
    list=extend_schema(tags=["Assets"], operation_id="v1_assets_list", parameters=LIST_PARAMS,
                       responses={200: AssetSerializer(many=True)}),
    create=extend_schema(tags=["Assets"], operation_id="v1_assets_create",
                         request=AssetWriteSerializer, responses={201: AssetSerializer}),
    retrieve=extend_schema(tags=["Assets"], operation_id="v1_assets_retrieve", responses={200: AssetSerializer}),
    update=extend_schema(tags=["Assets"], operation_id="v1_assets_update",
                         request=AssetWriteSerializer, responses={200: AssetSerializer}),
    partial_update=extend_schema(tags=["Assets"], operation_id="v1_assets_partial_update",
                                 request=AssetWriteSerializer, responses={200: AssetSerializer}),
    destroy=extend_schema(tags=["Assets"], operation_id="v1_assets_destroy", responses={204: None}),
)
class AssetViewSet(viewsets.ViewSet):
    permission_classes = [AssetPermission]

    # ✅ critical for drf-spectacular
    serializer_class = AssetSerializer
    queryset = Asset.objects.none()

    def list(self, request):
        ctx = require_org_context(request)
        qs = filter_entities(request, repo=asset_repo, org_id=ctx.org_id, filterset_class=AssetFilter)
        return paginate(request, qs, AssetSerializer)

    def create(self, request):
        ctx = require_org_context(request)

        ser = AssetWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = AssetService.create(org_id=ctx.org_id, actor_user_id=request.user.id, data=dict(ser.validated_data))
        return Response(AssetSerializer(obj).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = AssetService.get(org_id=ctx.org_id, asset_id=pk)
        return Response(AssetSerializer(obj).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = AssetWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = AssetService.update(
            org_id=ctx.org_id, asset_id=pk, actor_user_id=request.user.id, data=dict(ser.validated_data)
        )
        return Response(AssetSerializer(obj).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        AssetService.delete(org_id=ctx.org_id, asset_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Assets"], operation_id="v1_assets_restore", request=None, responses={200: AssetSerializer})
    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request, pk=None):
        ctx = require_org_context(request)
        obj = AssetService.restore(org_id=ctx.org_id, asset_id=pk, actor_user_id=request.user.id)
        return Response(AssetSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Assets"], operation_id="v1_assets_activity_create",
                   request=ActivityCreateSerializer, responses={201: AssetSerializer})
    @action(detail=True, methods=["post"], url_path="activity")
    def activity(self, request, pk=None):
        ctx = require_org_context(request)

        ser = ActivityCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = AssetService.add_activity(
            org_id=ctx.org_id,
            asset_id=pk,
            activity=ser.validated_data["activity"],
            performed_by=ser.validated_data.get("performed_by") or request.user.get_username(),
        )
        return Response(AssetSerializer(obj).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Assets"], operation_id="v1_assets_tickets",
                   request=TicketLinkSerializer, responses={200: AssetSerializer})
    @action(detail=True, methods=["post", "delete"], url_path="tickets")
    def tickets(self, request, pk=None):
        """POST associates a ticket, DELETE removes the association (`ticket_id` in body or query)."""
        ctx = require_org_context(request)

        data = request.data if request.method == "POST" else (request.data or request.query_params)
        ser = TicketLinkSerializer(data={"ticket_id": data.get("ticket_id")})
        ser.is_valid(raise_exception=True)
        ticket_id = ser.validated_data["ticket_id"]

        if request.method == "POST":
            obj = AssetService.associate_ticket(
                org_id=ctx.org_id, asset_id=pk, ticket_id=ticket_id, actor_user_id=request.user.id
            )
        else:
            obj = AssetService.remove_ticket(
                org_id=ctx.org_id, asset_id=pk, ticket_id=ticket_id, actor_user_id=request.user.id
            )
        return Response(AssetSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Assets"], operation_id="v1_assets_maintenance",
                   request=MaintenanceRecordCreateSerializer,
                   responses={200: MaintenanceRecordSerializer(many=True), 201: MaintenanceRecordSerializer})
    @action(detail=True, methods=["get", "post"], url_path="maintenance")
    def maintenance(self, request, pk=None):
        ctx = require_org_context(request)

        if request.method == "GET":
            qs = AssetService.list_maintenance(org_id=ctx.org_id, asset_id=pk)
            return Response(MaintenanceRecordSerializer(qs, many=True).data, status=status.HTTP_200_OK)

        ser = MaintenanceRecordCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        record = AssetService.add_maintenance_record(
            org_id=ctx.org_id, asset_id=pk, actor_user_id=request.user.id, data=ser.validated_data
        )
        return Response(MaintenanceRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Assets"], operation_id="v1_assets_stats", responses={200: AssetStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(AssetService.stats(org_id=ctx.org_id), status=status.HTTP_200_OK)
