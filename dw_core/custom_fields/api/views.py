# backend/dw_core/custom_fields/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from dw_core.common.api.fields import allowed_values_message
from dw_core.common.permissions import SettingsPermission
from dw_core.custom_fields.api.serializers import (
    CustomFieldCreateSerializer,
    CustomFieldSerializer,
    CustomFieldUpdateSerializer,
)
from dw_core.custom_fields.models import CustomField, CustomFieldModule
from dw_core.custom_fields.services import CustomFieldService
from dw_core.iam.scope import require_org_context


@extend_schema_view(
    list=extend_schema(
        tags=["Custom Fields"],
        operation_id="v1_custom_fields_list",
        parameters=[
            OpenApiParameter(name="module", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY,
                             required=False, description="Tickets, Assets or Clients."),
        ],
        responses={200: CustomFieldSerializer(many=True)},
    ),
    create=extend_schema(tags=["Custom Fields"], operation_id="v1_custom_fields_create",
                         request=CustomFieldCreateSerializer, responses={201: CustomFieldSerializer}),
    retrieve=extend_schema(tags=["Custom Fields"], operation_id="v1_custom_fields_retrieve",
                           responses={200: CustomFieldSerializer}),
    partial_update=extend_schema(tags=["Custom Fields"], operation_id="v1_custom_fields_partial_update",
                                 request=CustomFieldUpdateSerializer, responses={200: CustomFieldSerializer}),
    update=extend_schema(tags=["Custom Fields"], operation_id="v1_custom_fields_update",
                         request=CustomFieldUpdateSerializer, responses={200: CustomFieldSerializer}),
    destroy=extend_schema(tags=["Custom Fields"], operation_id="v1_custom_fields_destroy", responses={204: None}),
)
class CustomFieldViewSet(viewsets.ViewSet):
    permission_classes = [SettingsPermission]

    # ✅ critical for drf-spectacular
    serializer_class = CustomFieldSerializer
    queryset = CustomField.objects.none()

    def list(self, request):
        ctx = require_org_context(request)

        module = (request.query_params.get("module") or "").strip() or None
        if module and module not in CustomFieldModule.values:
            raise ValidationError(
                {"module": [f'Invalid value "{module}". ' + allowed_values_message(CustomFieldModule.values)]}
            )

        qs = CustomFieldService.list(org_id=ctx.org_id, module=module)
        return Response(CustomFieldSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def create(self, request):
        ctx = require_org_context(request)

        ser = CustomFieldCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = CustomFieldService.create(org_id=ctx.org_id, actor_user_id=request.user.id, data=dict(ser.validated_data))
        return Response(CustomFieldSerializer(obj).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = CustomFieldService.get(org_id=ctx.org_id, field_id=pk)
        return Response(CustomFieldSerializer(obj).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = CustomFieldUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = CustomFieldService.update(
            org_id=ctx.org_id, field_id=pk, actor_user_id=request.user.id, data=dict(ser.validated_data)
        )
        return Response(CustomFieldSerializer(obj).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        CustomFieldService.delete(org_id=ctx.org_id, field_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
