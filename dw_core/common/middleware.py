# backend/dw_core/common/middleware.py
from __future__ import annotations

import logging
from typing import Optional

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from dw_core.common.api.exceptions import build_error_envelope, ensure_request_id
from dw_core.iam.scope import (
    INVALID_SCOPE_MSG,
    MISSING_SCOPE_MSG,
    NOT_A_MEMBER_MSG,
    RequestContext,
    attach_context,
    parse_org_id,
    read_org_header,
)

logger = logging.getLogger(__name__)


class OrganizationScopeMiddleware(MiddlewareMixin):
    """
    Enforces organization scope for API requests made by users Django already
    knows about (session auth). JWT requests are resolved later by the DRF
    authentication class through the same resolver.

    Behavior:
      - Enforced for both /api/v1/* and /api/* (alias).
      - Most endpoints: X-Org-Id is required (400 if missing).
      - /me/ and /auth/setup-user/: header optional, but validated if present.
      - Auth endpoints (login/refresh/logout): scope ignored.
      - Docs/schema/admin endpoints: public.
      - Invalid UUID -> 400, not a member -> 403.
      - On success -> attaches request.org_context and request.org_id
    """

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    AUTH_PATH_SUFFIXES = (
        "/auth/login/",
        "/auth/refresh/",
        "/auth/logout/",
    )

    ALLOW_NO_SCOPE_EXACT_PATHS = (
        "/api/v1/",
        "/api/",
    )

    ALLOW_NO_SCOPE_SUFFIXES = (
        "/me/",
        "/auth/setup-user/",
    )

    def _is_api_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.ENFORCED_PREFIXES)

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _endswith_any(self, path: str, suffixes: tuple[str, ...]) -> bool:
        return any(path.endswith(s) for s in suffixes)

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        logger.warning("Scope rejected path=%s status=%s: %s", request.path, status_code, message)
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request) -> Optional[JsonResponse]:
        request.org_context = None
        request.org_id = None
        ensure_request_id(request)

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._is_api_path(path):
            return None

        if path in self.ALLOW_NO_SCOPE_EXACT_PATHS:
            return None

        if self._endswith_any(path, self.AUTH_PATH_SUFFIXES):
            return None

        # Unauthenticated here usually means JWT; the auth class resolves scope then.
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        raw = read_org_header(request)
        if not raw:
            if self._endswith_any(path, self.ALLOW_NO_SCOPE_SUFFIXES):
                return None
            return self._json_error(request, status_code=400, code="validation_error", message=MISSING_SCOPE_MSG)

        org_id = parse_org_id(raw)
        if org_id is None:
            return self._json_error(request, status_code=400, code="validation_error", message=INVALID_SCOPE_MSG)

        from dw_core.iam.services.membership import is_user_member_of_org

        if not is_user_member_of_org(user_id=user.id, org_id=org_id):
            return self._json_error(request, status_code=403, code="permission_denied", message=NOT_A_MEMBER_MSG)

        attach_context(request, RequestContext(org_id=org_id, user_id=user.id))
        return None
