# backend/dw_core/quotes/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.common.api.pagination import paginate
from dw_core.common.filters import filter_entities
from dw_core.common.permissions import QuotePermission
from dw_core.iam.scope import require_org_context
from dw_core.quotes.api.serializers import (
    QuoteSerializer,
    QuoteStatsSerializer,
    QuoteStatusSerializer,
    QuoteWriteSerializer,
)
from dw_core.quotes.filters import QuoteFilter
from dw_core.quotes.models import Quote
from dw_core.quotes.services import QuoteService, quote_repo


def _q(name: str, typ=OpenApiTypes.STR, description: str = "") -> OpenApiParameter:
    return OpenApiParameter(name=name, type=typ, location=OpenApiParameter.QUERY, required=False, description=description)


LIST_PARAMS = [
    _q("status", description="Comma-separated: Draft,Sent,Accepted,Rejected"),
    _q("client_id"),
    _q("client_name", description="Case-insensitive substring"),
    _q("include_deleted", OpenApiTypes.BOOL),
    _q("search", description="Subject or client name"),
]


@extend_schema_view(
    list=extend_schema(tags=["Quotes"], operation_id="v1_quotes_list", parameters=LIST_PARAMS,
                       responses={200: QuoteSerializer(many=True)}),
    create=extend_schema(tags=["Quotes"], operation_id="v1_quotes_create",
                         request=QuoteWriteSerializer, responses={201: QuoteSerializer}),
    retrieve=extend_schema(tags=["Quotes"], operation_id="v1_quotes_retrieve", responses={200: QuoteSerializer}),
    update=extend_schema(tags=["Quotes"], operation_id="v1_quotes_update",
                         request=QuoteWriteSerializer, responses={200: QuoteSerializer}),
    partial_update=extend_schema(tags=["Quotes"], operation_id="v1_quotes_partial_update",
                                 request=QuoteWriteSerializer, responses={200: QuoteSerializer}),
    destroy=extend_schema(tags=["Quotes"], operation_id="v1_quotes_destroy", responses={204: None}),
)
class QuoteViewSet(viewsets.ViewSet):
    permission_classes = [QuotePermission]

    # ✅ critical for drf-spectacular
    serializer_class = QuoteSerializer
    queryset = Quote.objects.none()

    def list(self, request):
        ctx = require_org_context(request)
        qs = filter_entities(request, repo=quote_repo, org_id=ctx.org_id, filterset_class=QuoteFilter)
        return paginate(request, qs, QuoteSerializer)

    def create(self, request):
        ctx = require_org_context(request)

        ser = QuoteWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = QuoteService.create(org_id=ctx.org_id, actor_user_id=request.user.id, data=dict(ser.validated_data))
        return Response(QuoteSerializer(obj).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = QuoteService.get(org_id=ctx.org_id, quote_id=pk)
        return Response(QuoteSerializer(obj).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = QuoteWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = QuoteService.update(
            org_id=ctx.org_id, quote_id=pk, actor_user_id=request.user.id, data=dict(ser.validated_data)
        )
        return Response(QuoteSerializer(obj).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        QuoteService.delete(org_id=ctx.org_id, quote_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Quotes"], operation_id="v1_quotes_set_status",
                   request=QuoteStatusSerializer, responses={200: QuoteSerializer})
    @action(detail=True, methods=["post", "patch"], url_path="status")
    def set_status(self, request, pk=None):
        ctx = require_org_context(request)

        ser = QuoteStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = QuoteService.set_status(
            org_id=ctx.org_id, quote_id=pk, status=ser.validated_data["status"], actor_user_id=request.user.id
        )
        return Response(QuoteSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Quotes"], operation_id="v1_quotes_stats", responses={200: QuoteStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(QuoteService.stats(org_id=ctx.org_id), status=status.HTTP_200_OK)
