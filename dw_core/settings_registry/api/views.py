# backend/dw_core/settings_registry/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.common.permissions import SettingsPermission
from dw_core.iam.scope import require_org_context
from dw_core.settings_registry.api.serializers import (
    SettingItemCreateSerializer,
    SettingItemSerializer,
    SettingItemUpdateSerializer,
    SettingStatsSerializer,
)
from dw_core.settings_registry.models import SettingItem, SettingModule
from dw_core.settings_registry.services import SettingsRegistryService

TYPE_PARAM = OpenApiParameter(
    name="type",
    type=OpenApiTypes.STR,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Setting kind (status, category, risk, impact, location, queue, priority, supplier).",
)


def _kind_param(request) -> str | None:
    return (request.query_params.get("type") or request.query_params.get("kind") or "").strip() or None


class SettingItemViewSet(viewsets.ViewSet):
    """
    Base for the per-module registries; subclasses pin `module`.
    Lists are small and returned whole, ordered by kind, sort_order, name.
    """
    permission_classes = [SettingsPermission]

    # ✅ critical for drf-spectacular
    serializer_class = SettingItemSerializer
    queryset = SettingItem.objects.none()

    module: str = ""
    schema_tag = "Settings"

    @extend_schema(parameters=[TYPE_PARAM], responses={200: SettingItemSerializer(many=True)})
    def list(self, request):
        ctx = require_org_context(request)
        qs = SettingsRegistryService.list(org_id=ctx.org_id, module=self.module, kind=_kind_param(request))
        return Response(SettingItemSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(request=SettingItemCreateSerializer, responses={201: SettingItemSerializer})
    def create(self, request):
        ctx = require_org_context(request)

        payload = request.data.copy() if hasattr(request.data, "copy") else dict(request.data)
        if "kind" not in payload and "type" not in payload and _kind_param(request):
            payload["kind"] = _kind_param(request)

        ser = SettingItemCreateSerializer(data=payload)
        ser.is_valid(raise_exception=True)

        obj = SettingsRegistryService.create(
            org_id=ctx.org_id,
            module=self.module,
            actor_user_id=request.user.id,
            data=ser.validated_data,
        )
        return Response(SettingItemSerializer(obj).data, status=status.HTTP_201_CREATED)

    @extend_schema(parameters=[TYPE_PARAM], responses={200: SettingItemSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = SettingsRegistryService.get(
            org_id=ctx.org_id, module=self.module, setting_id=pk, kind=_kind_param(request)
        )
        return Response(SettingItemSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(parameters=[TYPE_PARAM], request=SettingItemUpdateSerializer, responses={200: SettingItemSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(parameters=[TYPE_PARAM], request=SettingItemUpdateSerializer, responses={200: SettingItemSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    def _update(self, request, pk):
        ctx = require_org_context(request)

        ser = SettingItemUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = SettingsRegistryService.update(
            org_id=ctx.org_id,
            module=self.module,
            setting_id=pk,
            actor_user_id=request.user.id,
            data=ser.validated_data,
            kind=_kind_param(request),
        )
        return Response(SettingItemSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(parameters=[TYPE_PARAM], responses={204: None})
    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        SettingsRegistryService.delete(
            org_id=ctx.org_id,
            module=self.module,
            setting_id=pk,
            actor_user_id=request.user.id,
            kind=_kind_param(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={201: SettingItemSerializer(many=True)})
    @action(detail=False, methods=["post"], url_path="initialize")
    def initialize(self, request):
        ctx = require_org_context(request)
        created = SettingsRegistryService.initialize(
            org_id=ctx.org_id, module=self.module, actor_user_id=request.user.id
        )
        return Response(SettingItemSerializer(created, many=True).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: SettingStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(SettingsRegistryService.stats(org_id=ctx.org_id, module=self.module), status=status.HTTP_200_OK)


class AssetSettingsViewSet(SettingItemViewSet):
    module = SettingModule.ASSET


class ChangeManagementSettingsViewSet(SettingItemViewSet):
    module = SettingModule.CHANGE_MANAGEMENT


class InventorySettingsViewSet(SettingItemViewSet):
    module = SettingModule.INVENTORY


class ProjectSettingsViewSet(SettingItemViewSet):
    module = SettingModule.PROJECT


class TicketSettingsViewSet(SettingItemViewSet):
    module = SettingModule.TICKET
