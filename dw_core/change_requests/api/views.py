# backend/dw_core/change_requests/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.change_requests.api.serializers import (
    ApproveSerializer,
    ChangeApprovalSerializer,
    ChangeRequestLinksSerializer,
    ChangeRequestSerializer,
    ChangeRequestStatsSerializer,
    ChangeRequestWriteSerializer,
    RejectSerializer,
)
from dw_core.change_requests.filters import ChangeRequestFilter
from dw_core.change_requests.models import ChangeRequest
from dw_core.change_requests.services import UPCOMING_DAYS, ChangeRequestService, change_repo
from dw_core.common.api.pagination import paginate, parse_limit
from dw_core.common.filters import filter_entities
from dw_core.common.permissions import ChangeRequestPermission
from dw_core.iam.scope import require_org_context


def _q(name: str, typ=OpenApiTypes.STR, description: str = "") -> OpenApiParameter:
    return OpenApiParameter(name=name, type=typ, location=OpenApiParameter.QUERY, required=False, description=description)


LIST_PARAMS = [
    _q("status", description="Comma-separated statuses"),
    _q("risk_level", description="Comma-separated: Low,Medium,High,Critical"),
    _q("impact", description="Comma-separated: Low,Medium,High"),
    _q("category", description="Comma-separated category names"),
    _q("client"),
    _q("submitted_by"),
    _q("start_date", OpenApiTypes.DATETIME, "planned_start_date on or after"),
    _q("end_date", OpenApiTypes.DATETIME, "planned_start_date on or before"),
    _q("include_deleted", OpenApiTypes.BOOL),
    _q("search", description="Title, description, client, submitter or category"),
]


def _username(request) -> str:
    return request.user.get_username()


@extend_schema_view(
    list=extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_list", parameters=LIST_PARAMS,
                       responses={200: ChangeRequestSerializer(many=True)}),
    create=extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_create",
                         request=ChangeRequestWriteSerializer, responses={201: ChangeRequestSerializer}),
    retrieve=extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_retrieve",
                           responses={200: ChangeRequestSerializer}),
    update=extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_update",
                         request=ChangeRequestWriteSerializer, responses={200: ChangeRequestSerializer}),
    partial_update=extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_partial_update",
                                 request=ChangeRequestWriteSerializer, responses={200: ChangeRequestSerializer}),
    destroy=extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_destroy", responses={204: None}),
)
class ChangeRequestViewSet(viewsets.ViewSet):
    permission_classes = [ChangeRequestPermission]

    # ✅ critical for drf-spectacular
    serializer_class = ChangeRequestSerializer
    queryset = ChangeRequest.objects.none()

    def list(self, request):
        ctx = require_org_context(request)
        qs = filter_entities(request, repo=change_repo, org_id=ctx.org_id, filterset_class=ChangeRequestFilter)
        return paginate(request, qs, ChangeRequestSerializer)

    def create(self, request):
        ctx = require_org_context(request)

        ser = ChangeRequestWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        data = dict(ser.validated_data)
        data.setdefault("submitted_by", _username(request))

        obj = ChangeRequestService.create(org_id=ctx.org_id, actor_user_id=request.user.id, data=data)
        return Response(ChangeRequestSerializer(obj).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = ChangeRequestService.get(org_id=ctx.org_id, change_id=pk)
        return Response(ChangeRequestSerializer(obj).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = ChangeRequestWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = ChangeRequestService.update(
            org_id=ctx.org_id, change_id=pk, actor_user_id=request.user.id, data=dict(ser.validated_data)
        )
        return Response(ChangeRequestSerializer(obj).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        ChangeRequestService.delete(org_id=ctx.org_id, change_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # -------------------------
    # Approval workflow
    # -------------------------
    @extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_approve",
                   request=ApproveSerializer, responses={200: ChangeRequestSerializer})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        ctx = require_org_context(request)

        ser = ApproveSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = ChangeRequestService.approve(
            org_id=ctx.org_id,
            change_id=pk,
            approved_by=ser.validated_data.get("approved_by") or _username(request),
            reason=ser.validated_data.get("reason"),
            actor_user_id=request.user.id,
        )
        return Response(ChangeRequestSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_reject",
                   request=RejectSerializer, responses={200: ChangeRequestSerializer})
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        ctx = require_org_context(request)

        ser = RejectSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = ChangeRequestService.reject(
            org_id=ctx.org_id,
            change_id=pk,
            rejected_by=ser.validated_data.get("rejected_by") or _username(request),
            reason=ser.validated_data.get("reason", ""),
            actor_user_id=request.user.id,
        )
        return Response(ChangeRequestSerializer(obj).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_approvals",
                   responses={200: ChangeApprovalSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="approvals")
    def approvals(self, request, pk=None):
        ctx = require_org_context(request)
        qs = ChangeRequestService.approvals(org_id=ctx.org_id, change_id=pk)
        return Response(ChangeApprovalSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_links",
                   responses={200: ChangeRequestLinksSerializer})
    @action(detail=True, methods=["get"], url_path="links")
    def links(self, request, pk=None):
        ctx = require_org_context(request)
        out = ChangeRequestService.links(org_id=ctx.org_id, change_id=pk)
        return Response(ChangeRequestLinksSerializer(out).data, status=status.HTTP_200_OK)

    # -------------------------
    # Collection reads
    # -------------------------
    @extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_stats",
                   responses={200: ChangeRequestStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(ChangeRequestService.stats(org_id=ctx.org_id), status=status.HTTP_200_OK)

    @extend_schema(tags=["Change Requests"], operation_id="v1_change_requests_upcoming",
                   parameters=[_q("days", OpenApiTypes.INT, "Window in days (default 7, max 365)")],
                   responses={200: ChangeRequestSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="upcoming")
    def upcoming(self, request):
        ctx = require_org_context(request)
        days = parse_limit(request.query_params.get("days"), default=UPCOMING_DAYS, maximum=365)
        qs = ChangeRequestService.upcoming(org_id=ctx.org_id, days=days)
        return Response(ChangeRequestSerializer(qs, many=True).data, status=status.HTTP_200_OK)
