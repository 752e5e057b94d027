# backend/dw_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class DeskwiseAutoSchema(AutoSchema):
    """
    Global OpenAPI tweaks:

    - X-Org-Id header on every org-scoped endpoint
    - optional Idempotency-Key header on unsafe methods
    - no org header on auth/me/setup endpoints or spectacular's own views
    """

    ORG_HEADER = OpenApiParameter(
        name="X-Org-Id",
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=True,
        description="Organization scope UUID (required for org-scoped endpoints).",
    )

    IDEMPOTENCY_HEADER = OpenApiParameter(
        name="Idempotency-Key",
        type=OpenApiTypes.STR,
        location=OpenApiParameter.HEADER,
        required=False,
        description="Optional key for safely retrying writes (honoured by inventory deploy-asset).",
    )

    UNSCOPED_MODULE_PREFIXES = ("dw_core.iam.api.",)
    UNSCOPED_VIEW_NAMES = {"SpectacularAPIView", "SpectacularSwaggerView", "SetupUserView"}

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        if view.__class__.__name__ in self.UNSCOPED_VIEW_NAMES:
            return True

        module = view.__class__.__module__ or ""
        return module.startswith(self.UNSCOPED_MODULE_PREFIXES)

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])
        existing = {p.name.lower() for p in params}

        if self.method not in ("GET", "HEAD", "OPTIONS") and "idempotency-key" not in existing:
            params.append(self.IDEMPOTENCY_HEADER)

        if not self._is_unscoped_endpoint() and "x-org-id" not in existing:
            params.append(self.ORG_HEADER)

        return params
