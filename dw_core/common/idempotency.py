# backend/dw_core/common/idempotency.py
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from dw_core.common.api.exceptions import ConflictError
from dw_core.common.models import IdempotencyRecord

logger = logging.getLogger(__name__)


def get_key(request) -> str | None:
    # In DRF test client: "HTTP_IDEMPOTENCY_KEY" becomes request.META["HTTP_IDEMPOTENCY_KEY"]
    raw = request.META.get("HTTP_IDEMPOTENCY_KEY")
    if raw is None:
        return None
    key = str(raw).strip()
    return key or None


def _lookup(org_id, user_id, method, path, key) -> dict:
    return {
        "org_id": org_id,
        "user_id": int(user_id),
        "method": method.upper(),
        "path": path,
        "idempotency_key": str(key),
    }


def claim(org_id, user_id, method, path, key) -> tuple[int, dict] | None:
    """
    Reserves `key` for the current request. Call inside the transaction that
    performs the write, and finish with `complete()` in that same transaction.

    Returns (status_code, response_data) when a completed response is stored
    (replay), or None when this request now owns the key. A concurrent request
    with the same key waits on the unique index until the owner commits or
    rolls back. A reservation that is still pending is a 409.
    """
    lookup = _lookup(org_id, user_id, method, path, key)
    try:
        with transaction.atomic():
            IdempotencyRecord.objects.create(**lookup, is_pending=True, status_code=0, response_data={})
        return None
    except IntegrityError:
        pass

    rec = IdempotencyRecord.objects.select_for_update().get(**lookup)
    if rec.is_pending:
        logger.warning("Idempotency key still in progress key=%s path=%s", key, path)
        raise ConflictError("A request with this Idempotency-Key is still in progress.")

    logger.info("Replaying idempotent response key=%s path=%s", key, path)
    return rec.status_code, rec.response_data


def complete(org_id, user_id, method, path, key, response_data, status_code: int = 200) -> None:
    IdempotencyRecord.objects.filter(**_lookup(org_id, user_id, method, path, key)).update(
        is_pending=False,
        status_code=int(status_code),
        response_data=response_data,
    )
