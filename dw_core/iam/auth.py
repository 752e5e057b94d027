# backend/dw_core/iam/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication

from dw_core.iam.scope import apply_org_scope


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token

    Resolves the organization context (X-Org-Id) once the user is known.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header:
            auth_result = super().authenticate(request)
            if auth_result is None:
                return None
            user, token = auth_result
            apply_org_scope(request, user=user)
            return user, token

        cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "dw_access")
        raw_token = request.COOKIES.get(cookie_name)
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        user = self.get_user(validated_token)

        apply_org_scope(request, user=user)
        return user, validated_token


class CredentialsOnlyAuthentication(JWTAuthentication):
    """
    For login/refresh: any access token on the request is ignored (it may be
    stale), but credential failures still answer 401 with WWW-Authenticate.
    """

    def authenticate(self, request):
        return None
