# backend/dw_core/inventory/api/views.py
from __future__ import annotations

from django.db import transaction
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.assets.api.serializers import AssetSerializer
from dw_core.common.api.pagination import paginate, parse_limit
from dw_core.common.filters import filter_entities
from dw_core.common.idempotency import claim, complete, get_key
from dw_core.common.permissions import InventoryPermission
from dw_core.iam.scope import require_org_context
from dw_core.inventory.api.serializers import (
    DeployAssetRequestSerializer,
    DeployAssetResponseSerializer,
    DeploySerializer,
    InventoryItemSerializer,
    InventoryItemWriteSerializer,
    InventoryStatsSerializer,
    StockAdjustSerializer,
    StockMovementSerializer,
)
from dw_core.inventory.filters import InventoryItemFilter
from dw_core.inventory.models import InventoryItem
from dw_core.inventory.services import DEFAULT_MOVEMENTS_LIMIT, InventoryService, inventory_repo

DEPLOYED_MSG = "Inventory item deployed as asset successfully"


def _q(name: str, typ=OpenApiTypes.STR, description: str = "") -> OpenApiParameter:
    return OpenApiParameter(name=name, type=typ, location=OpenApiParameter.QUERY, required=False, description=description)


LIST_PARAMS = [
    _q("category", description="Comma-separated: Hardware,Software License,Consumable,Part"),
    _q("owner", description="Comma-separated owners (MSP or client names)"),
    _q("supplier", description="Comma-separated supplier names"),
    _q("location", description="Case-insensitive substring"),
    _q("low_stock", OpenApiTypes.BOOL, "quantity <= reorder_point"),
    _q("out_of_stock", OpenApiTypes.BOOL, "quantity <= 0"),
    _q("include_deleted", OpenApiTypes.BOOL),
    _q("search", description="Name, SKU, category, location, supplier, supplier SKU or barcode"),
]
LIMIT_PARAM = _q("limit", OpenApiTypes.INT, "Max records (default 50, max 500)")


def _performer(request) -> str:
    return request.user.get_username() if request.user and request.user.is_authenticated else "system"


@extend_schema_view(
    list=extend_schema(tags=["Inventory"], operation_id="v1_inventory_list", parameters=LIST_PARAMS,
                       responses={200: InventoryItemSerializer(many=True)}),
    create=extend_schema(tags=["Inventory"], operation_id="v1_inventory_create",
                         request=InventoryItemWriteSerializer, responses={201: InventoryItemSerializer}),
    retrieve=extend_schema(tags=["Inventory"], operation_id="v1_inventory_retrieve",
                           responses={200: InventoryItemSerializer}),
    update=extend_schema(tags=["Inventory"], operation_id="v1_inventory_update",
                         request=InventoryItemWriteSerializer, responses={200: InventoryItemSerializer}),
    partial_update=extend_schema(tags=["Inventory"], operation_id="v1_inventory_partial_update",
                                 request=InventoryItemWriteSerializer, responses={200: InventoryItemSerializer}),
    destroy=extend_schema(tags=["Inventory"], operation_id="v1_inventory_destroy", responses={204: None}),
)
class InventoryItemViewSet(viewsets.ViewSet):
    permission_classes = [InventoryPermission]

    # ✅ critical for drf-spectacular
    serializer_class = InventoryItemSerializer
    queryset = InventoryItem.objects.none()

    def list(self, request):
        ctx = require_org_context(request)
        qs = filter_entities(request, repo=inventory_repo, org_id=ctx.org_id, filterset_class=InventoryItemFilter)
        return paginate(request, qs, InventoryItemSerializer)

    def create(self, request):
        ctx = require_org_context(request)

        ser = InventoryItemWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        item = InventoryService.create(
            org_id=ctx.org_id,
            actor_user_id=request.user.id,
            data=dict(ser.validated_data),
            performed_by=_performer(request),
        )
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        item = InventoryService.get(org_id=ctx.org_id, item_id=pk)
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = InventoryItemWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        item = InventoryService.update(
            org_id=ctx.org_id,
            item_id=pk,
            actor_user_id=request.user.id,
            data=dict(ser.validated_data),
            performed_by=_performer(request),
        )
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        InventoryService.delete(org_id=ctx.org_id, item_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_restore", request=None,
                   responses={200: InventoryItemSerializer})
    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request, pk=None):
        ctx = require_org_context(request)
        item = InventoryService.restore(org_id=ctx.org_id, item_id=pk, actor_user_id=request.user.id)
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_adjust",
                   request=StockAdjustSerializer, responses={200: InventoryItemSerializer})
    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        ctx = require_org_context(request)

        ser = StockAdjustSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        item = InventoryService.adjust_stock(
            org_id=ctx.org_id,
            item_id=pk,
            quantity=ser.validated_data["quantity"],
            reason=ser.validated_data["reason"],
            reference=ser.validated_data.get("reference", ""),
            actor_user_id=request.user.id,
            performed_by=_performer(request),
        )
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_deploy",
                   request=DeploySerializer, responses={200: InventoryItemSerializer})
    @action(detail=True, methods=["post"], url_path="deploy")
    def deploy(self, request, pk=None):
        ctx = require_org_context(request)

        ser = DeploySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        item = InventoryService.deploy(
            org_id=ctx.org_id,
            item_id=pk,
            deployed_to=ser.validated_data["deployed_to"],
            notes=ser.validated_data.get("notes", ""),
            actor_user_id=request.user.id,
            performed_by=_performer(request),
        )
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_deploy_asset",
                   request=DeployAssetRequestSerializer, responses={201: DeployAssetResponseSerializer})
    @action(detail=True, methods=["post"], url_path="deploy-asset")
    def deploy_asset(self, request, pk=None):
        ctx = require_org_context(request)
        idem = get_key(request)

        with transaction.atomic():
            if idem:
                cached = claim(ctx.org_id, request.user.id, request.method, request.path, idem)
                if cached is not None:
                    code, data = cached
                    return Response(data, status=code)

            item, asset = InventoryService.deploy_asset(
                org_id=ctx.org_id,
                item_id=pk,
                payload=dict(request.data.items()),
                actor_user_id=request.user.id,
                performed_by=_performer(request),
            )

            out = {
                "inventory_item": InventoryItemSerializer(item).data,
                "asset": AssetSerializer(asset).data,
                "message": DEPLOYED_MSG,
            }

            if idem:
                complete(
                    ctx.org_id, request.user.id, request.method, request.path, idem, out,
                    status_code=status.HTTP_201_CREATED,
                )

        return Response(out, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_item_movements", parameters=[LIMIT_PARAM],
                   responses={200: StockMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        ctx = require_org_context(request)
        limit = parse_limit(request.query_params.get("limit"), default=DEFAULT_MOVEMENTS_LIMIT, maximum=500)
        qs = InventoryService.movements(org_id=ctx.org_id, item_id=pk, limit=limit)
        return Response(StockMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_movements", parameters=[LIMIT_PARAM],
                   responses={200: StockMovementSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="movements")
    def all_movements(self, request):
        ctx = require_org_context(request)
        limit = parse_limit(request.query_params.get("limit"), default=DEFAULT_MOVEMENTS_LIMIT, maximum=500)
        qs = InventoryService.movements(org_id=ctx.org_id, limit=limit)
        return Response(StockMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_low_stock",
                   responses={200: InventoryItemSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        ctx = require_org_context(request)
        return paginate(request, InventoryService.low_stock(org_id=ctx.org_id), InventoryItemSerializer)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_out_of_stock",
                   responses={200: InventoryItemSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="out-of-stock")
    def out_of_stock(self, request):
        ctx = require_org_context(request)
        return paginate(request, InventoryService.out_of_stock(org_id=ctx.org_id), InventoryItemSerializer)

    @extend_schema(tags=["Inventory"], operation_id="v1_inventory_stats", responses={200: InventoryStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(InventoryService.stats(org_id=ctx.org_id), status=status.HTTP_200_OK)
