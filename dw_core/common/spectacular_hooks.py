# backend/dw_core/common/spectacular_hooks.py
from __future__ import annotations


def preprocess_exclude_legacy_api(endpoints):
    """
    ROOT_URLCONF mounts the same router twice:
      /api/v1/  (primary)
      /api/     (alias)

    Keep only /api/v1/* in the schema so operation ids don't collide.
    """
    return [
        (path, path_regex, method, callback)
        for path, path_regex, method, callback in endpoints
        if not (path.startswith("/api/") and not path.startswith("/api/v1/"))
    ]
