# backend/dw_core/iam/scope.py
"""
Single request-context resolver.

Three entry points call into it:
  - OrganizationScopeMiddleware (session-authenticated Django requests)
  - CookieOrHeaderJWTAuthentication (after the JWT user is known)
  - require_org_context() from the DRF permission layer (covers force_authenticate)

The first caller wins; the resolved RequestContext is cached on the request.
"""
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

from dw_core.iam.services.membership import is_user_member_of_org


@dataclass(frozen=True)
class RequestContext:
    org_id: UUID
    user_id: int | None


HDR_ORG = "X-Org-Id"
HDR_ORG_LEGACY = "X-Organization-Id"

MISSING_SCOPE_MSG = "Missing organization header. Provide X-Org-Id."
INVALID_SCOPE_MSG = "Invalid organization header. Provide a valid UUID for X-Org-Id."
NOT_A_MEMBER_MSG = "You do not have access to the selected organization."


def parse_org_id(raw) -> UUID | None:
    try:
        return UUID(str(raw))
    except (TypeError, ValueError):
        return None


def read_org_header(request) -> str | None:
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(HDR_ORG) or headers.get(HDR_ORG_LEGACY)
        if v:
            return v
    meta = getattr(request, "META", {}) or {}
    return meta.get("HTTP_X_ORG_ID") or meta.get("HTTP_X_ORGANIZATION_ID")


def resolve_org_from_headers(request) -> UUID | None:
    """
    Returns the org UUID from headers.
    - header absent: None
    - header malformed: 400 ValidationError
    """
    raw = read_org_header(request)
    if not raw:
        return None

    org_id = parse_org_id(raw)
    if org_id is None:
        raise ValidationError(INVALID_SCOPE_MSG)
    return org_id


def assert_user_membership(user, org_id: UUID) -> None:
    """
    Ensures user has an active membership in org_id. Raises 403 if not.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required to set organization.")

    if not is_user_member_of_org(user_id=user.id, org_id=org_id):
        raise PermissionDenied(NOT_A_MEMBER_MSG)


def attach_context(request, ctx: RequestContext) -> RequestContext:
    request.org_context = ctx
    request.org_id = ctx.org_id
    # DRF Request proxies attribute reads to the wrapped HttpRequest, not writes
    inner = getattr(request, "_request", None)
    if inner is not None:
        inner.org_context = ctx
        inner.org_id = ctx.org_id
    return ctx


def apply_org_scope(request, user=None) -> RequestContext | None:
    """
    Used by the auth layer.

    If the org header is present:
      - validates it is a UUID
      - verifies membership
      - attaches request.org_context / request.org_id
    If absent: returns None and does nothing.
    """
    existing = getattr(request, "org_context", None)
    if existing is not None:
        return existing

    org_id = resolve_org_from_headers(request)
    if org_id is None:
        return None

    u = user or getattr(request, "user", None)
    assert_user_membership(u, org_id)
    return attach_context(request, RequestContext(org_id=org_id, user_id=getattr(u, "id", None)))


def require_org_context(request) -> RequestContext:
    """
    Returns the request's RequestContext, resolving it on first use.
    Missing header -> 400, malformed -> 400, not a member -> 403.
    """
    ctx = apply_org_scope(request)
    if ctx is None:
        raise ValidationError(MISSING_SCOPE_MSG)
    return ctx
