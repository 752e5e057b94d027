# backend/dw_core/projects/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from dw_core.common.api.pagination import paginate, parse_limit
from dw_core.common.filters import filter_entities
from dw_core.common.permissions import ProjectPermission
from dw_core.iam.scope import require_org_context
from dw_core.projects.api.serializers import ProjectSerializer, ProjectStatsSerializer, ProjectWriteSerializer
from dw_core.projects.filters import ProjectFilter
from dw_core.projects.models import Project
from dw_core.projects.services import UPCOMING_DAYS, ProjectService, project_repo


def _q(name: str, typ=OpenApiTypes.STR, description: str = "") -> OpenApiParameter:
    return OpenApiParameter(name=name, type=typ, location=OpenApiParameter.QUERY, required=False, description=description)


LIST_PARAMS = [
    _q("status", description="Comma-separated: Not Started,In Progress,On Hold,Completed,Cancelled"),
    _q("client", description="Case-insensitive substring"),
    _q("team_member"),
    _q("tag"),
    _q("start_date", OpenApiTypes.DATE, "start_date on or after"),
    _q("end_date", OpenApiTypes.DATE, "start_date on or before"),
    _q("include_deleted", OpenApiTypes.BOOL),
    _q("search", description="Name, description or client"),
]


@extend_schema_view(
    list=extend_schema(tags=["Projects"], operation_id="v1_projects_list", parameters=LIST_PARAMS,
                       responses={200: ProjectSerializer(many=True)}),
    create=extend_schema(tags=["Projects"], operation_id="v1_projects_create",
                         request=ProjectWriteSerializer, responses={201: ProjectSerializer}),
    retrieve=extend_schema(tags=["Projects"], operation_id="v1_projects_retrieve", responses={200: ProjectSerializer}),
    update=extend_schema(tags=["Projects"], operation_id="v1_projects_update",
                         request=ProjectWriteSerializer, responses={200: ProjectSerializer}),
    partial_update=extend_schema(tags=["Projects"], operation_id="v1_projects_partial_update",
                                 request=ProjectWriteSerializer, responses={200: ProjectSerializer}),
    destroy=extend_schema(tags=["Projects"], operation_id="v1_projects_destroy", responses={204: None}),
)
class ProjectViewSet(viewsets.ViewSet):
    permission_classes = [ProjectPermission]

    # ✅ critical for drf-spectacular
    serializer_class = ProjectSerializer
    queryset = Project.objects.none()

    def list(self, request):
        ctx = require_org_context(request)
        qs = filter_entities(request, repo=project_repo, org_id=ctx.org_id, filterset_class=ProjectFilter)
        return paginate(request, qs, ProjectSerializer)

    def create(self, request):
        ctx = require_org_context(request)

        ser = ProjectWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        obj = ProjectService.create(org_id=ctx.org_id, actor_user_id=request.user.id, data=dict(ser.validated_data))
        return Response(ProjectSerializer(obj).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ctx = require_org_context(request)
        obj = ProjectService.get(org_id=ctx.org_id, project_id=pk)
        return Response(ProjectSerializer(obj).data, status=status.HTTP_200_OK)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def partial_update(self, request, pk=None):
        ctx = require_org_context(request)

        ser = ProjectWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        obj = ProjectService.update(
            org_id=ctx.org_id, project_id=pk, actor_user_id=request.user.id, data=dict(ser.validated_data)
        )
        return Response(ProjectSerializer(obj).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        ctx = require_org_context(request)
        ProjectService.delete(org_id=ctx.org_id, project_id=pk, actor_user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Projects"], operation_id="v1_projects_stats", responses={200: ProjectStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        ctx = require_org_context(request)
        return Response(ProjectService.stats(org_id=ctx.org_id), status=status.HTTP_200_OK)

    @extend_schema(tags=["Projects"], operation_id="v1_projects_upcoming",
                   parameters=[_q("days", OpenApiTypes.INT, "Window in days (default 30, max 365)")],
                   responses={200: ProjectSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="upcoming")
    def upcoming(self, request):
        ctx = require_org_context(request)
        days = parse_limit(request.query_params.get("days"), default=UPCOMING_DAYS, maximum=365)
        qs = ProjectService.upcoming(org_id=ctx.org_id, days=days)
        return Response(ProjectSerializer(qs, many=True).data, status=status.HTTP_200_OK)
