# backend/dw_core/organizations/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from dw_core.common.permissions import OrganizationAdminPermission
from dw_core.iam.scope import require_org_context
from dw_core.organizations.api.serializers import (
    ModuleSettingsSerializer,
    ModuleSettingsUpdateSerializer,
    OrganizationSerializer,
    OrganizationUpdateSerializer,
    SetupUserRequestSerializer,
    SetupUserResponseSerializer,
)
from dw_core.organizations.selectors import get_organization
from dw_core.organizations.services import OrganizationService


class OrganizationView(APIView):
    """
    The active organization (X-Org-Id). Read for members, PATCH for admins.
    """
    permission_classes = [OrganizationAdminPermission]

    @extend_schema(tags=["Organization"], operation_id="v1_organization_retrieve", responses={200: OrganizationSerializer})
    def get(self, request):
        ctx = require_org_context(request)
        return Response(OrganizationSerializer(get_organization(org_id=ctx.org_id)).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Organization"],
        operation_id="v1_organization_partial_update",
        request=OrganizationUpdateSerializer,
        responses={200: OrganizationSerializer},
    )
    def patch(self, request):
        ctx = require_org_context(request)

        ser = OrganizationUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        org = OrganizationService.update(org_id=ctx.org_id, data=ser.validated_data, actor_user_id=request.user.id)
        return Response(OrganizationSerializer(org).data, status=status.HTTP_200_OK)


class ModuleSettingsView(APIView):
    permission_classes = [OrganizationAdminPermission]

    @extend_schema(tags=["Organization"], operation_id="v1_settings_modules_retrieve", responses={200: ModuleSettingsSerializer})
    def get(self, request):
        ctx = require_org_context(request)
        org = get_organization(org_id=ctx.org_id)
        return Response(
            {"enabled_modules": org.enabled_modules, "is_internal_it_mode": org.is_internal_it_mode},
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Organization"],
        operation_id="v1_settings_modules_update",
        request=ModuleSettingsUpdateSerializer,
        responses={200: ModuleSettingsSerializer},
    )
    def put(self, request):
        ctx = require_org_context(request)

        ser = ModuleSettingsUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        org = OrganizationService.update_enabled_modules(
            org_id=ctx.org_id,
            enabled_modules=ser.validated_data["enabled_modules"],
            is_internal_it_mode=ser.validated_data.get("is_internal_it_mode"),
            actor_user_id=request.user.id,
        )
        return Response(
            {"enabled_modules": org.enabled_modules, "is_internal_it_mode": org.is_internal_it_mode},
            status=status.HTTP_200_OK,
        )


class SetupUserView(APIView):
    """
    First sign-in bootstrap. No X-Org-Id required: the caller may not have an org yet.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["IAM"],
        operation_id="v1_auth_setup_user",
        request=SetupUserRequestSerializer,
        responses={200: SetupUserResponseSerializer, 201: SetupUserResponseSerializer},
    )
    def post(self, request):
        ser = SetupUserRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = OrganizationService.bootstrap_for_user(
            user=request.user,
            workos_org_id=ser.validated_data.get("workos_org_id") or "",
        )
        org = result.organization

        if not result.created:
            return Response(
                {
                    "success": True,
                    "organization_id": str(org.id),
                    "organization_name": org.name,
                    "message": "User already has organization",
                },
                status=status.HTTP_200_OK,
            )

        return Response(
            {
                "success": True,
                "organization_id": str(org.id),
                "organization_name": org.name,
                "message": "User and organization setup completed successfully",
                "requires_session_refresh": True,
            },
            status=status.HTTP_201_CREATED,
        )
