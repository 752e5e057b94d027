# backend/dw_core/portal/api/views.py
from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from dw_core.common.permissions import OrgMemberPermission
from dw_core.iam.scope import require_org_context
from dw_core.portal.api.serializers import PortalToolResultSerializer, PortalToolRunSerializer, PortalToolSerializer
from dw_core.portal.tools import catalog, run_tool

logger = logging.getLogger(__name__)


class PortalToolListView(APIView):
    permission_classes = [OrgMemberPermission]

    @extend_schema(tags=["Portal"], operation_id="v1_portal_tools_list", responses={200: PortalToolSerializer(many=True)})
    def get(self, request):
        require_org_context(request)
        return Response(catalog(), status=status.HTTP_200_OK)


class PortalToolRunView(APIView):
    permission_classes = [OrgMemberPermission]

    @extend_schema(
        tags=["Portal"],
        operation_id="v1_portal_tools_run",
        request=PortalToolRunSerializer,
        responses={200: PortalToolResultSerializer},
    )
    def post(self, request, name: str):
        ctx = require_org_context(request)

        ser = PortalToolRunSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        results = run_tool(
            name=name,
            org_id=ctx.org_id,
            client=ser.validated_data["client"],
            query=ser.validated_data["query"],
        )
        logger.info("portal tool %s org=%s results=%s", name, ctx.org_id, len(results))
        return Response({"tool": name, "results": results}, status=status.HTTP_200_OK)
