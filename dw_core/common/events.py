# backend/dw_core/common/events.py
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

_registry: Dict[str, List[Handler]] = defaultdict(list)

SETTINGS_USAGE_CHANGED = "settings.usage_changed"


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("settings.usage_changed")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        if fn not in _registry[event_name]:
            _registry[event_name].append(fn)
        return fn
    return _decorator


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish an event to in-process subscribers.

    Handlers run synchronously inside the caller's transaction (not on_commit),
    so a failing handler rolls the write back with it.
    Keep payloads ID-based to avoid cross-app imports.
    """
    handlers = _registry.get(event_name, [])
    logger.debug("publish %s -> %d handler(s)", event_name, len(handlers))
    for handler in handlers:
        handler(payload)
