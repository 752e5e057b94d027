# backend/dw_core/settings_registry/subscribers.py
from __future__ import annotations

import logging
from uuid import UUID

from dw_core.common.events import SETTINGS_USAGE_CHANGED, subscribe
from dw_core.settings_registry.services import SettingsRegistryService

logger = logging.getLogger(__name__)


@subscribe(SETTINGS_USAGE_CHANGED)
def refresh_in_use_counts(payload):
    """
    Payload:
      {"org_id": "<uuid>", "module": "asset"}
    """
    org_id = UUID(str(payload["org_id"]))
    module = payload["module"]

    changed = SettingsRegistryService.refresh_usage_counts(org_id=org_id, module=module)
    if changed:
        logger.debug("in_use_count refreshed org=%s module=%s changed=%s", org_id, module, changed)
