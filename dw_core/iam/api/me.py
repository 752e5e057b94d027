# backend/dw_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from dw_core.iam.api.schema_serializers import MeResponseSerializer
from dw_core.iam.scope import apply_org_scope
from dw_core.iam.services.membership import list_user_organizations, membership_role_code


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["IAM"], operation_id="v1_me_retrieve", responses={200: MeResponseSerializer})
    def get(self, request):
        """
        Returns user info + organization memberships.
        X-Org-Id is OPTIONAL here; if provided it MUST be valid and the user MUST be a member (400/403).
        """
        ctx = apply_org_scope(request)

        active_org = None
        if ctx is not None:
            from dw_core.organizations.selectors import get_organization

            org = get_organization(org_id=ctx.org_id)
            active_org = {
                "org_id": str(ctx.org_id),
                "role_code": membership_role_code(user_id=request.user.id, org_id=ctx.org_id),
                "enabled_modules": org.enabled_modules,
                "is_internal_it_mode": org.is_internal_it_mode,
            }

        return Response(
            {
                "user": {
                    "id": request.user.id,
                    "username": getattr(request.user, "username", None),
                    "email": getattr(request.user, "email", None),
                    "is_superuser": bool(getattr(request.user, "is_superuser", False)),
                },
                "organizations": list_user_organizations(request.user.id),
                "active_org": active_org,
            },
            status=status.HTTP_200_OK,
        )
