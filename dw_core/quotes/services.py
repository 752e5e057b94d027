# backend/dw_core/quotes/services.py
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import Avg, Count, Sum
from rest_framework.exceptions import ValidationError

from dw_core.common.api.fields import allowed_values_message
from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.quotes.models import Quote, QuoteStatus

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def price_line_items(items) -> tuple[list[dict], Decimal]:
    """
    Normalizes line items and returns (items, total).
    Each stored item carries its own `amount` = quantity * unit_price.
    """
    priced: list[dict] = []
    total = Decimal("0")
    for item in items or []:
        quantity = Decimal(str(item.get("quantity", 0)))
        unit_price = _money(item.get("unit_price", 0))
        amount = _money(quantity * unit_price)
        priced.append(
            {
                "description": item.get("description", ""),
                "quantity": float(quantity),
                "unit_price": str(unit_price),
                "amount": str(amount),
            }
        )
        total += amount
    return priced, _money(total)


def _clean_quote(*, org_id: UUID, data: dict, instance=None) -> dict:
    if instance is not None and "status" in data:
        raise ValidationError({"status": ["Use the status endpoint to change a quote's status."]})

    if instance is None or "line_items" in data:
        data["line_items"], data["total"] = price_line_items(data.get("line_items"))
    return data


QUOTE_POLICY = EntityPolicy(
    entity_type="Quote",
    event_prefix="quotes.quote",
    writable_fields=frozenset({"subject", "client_name", "client_id", "status", "expiry_date", "line_items"}),
    search_fields=("subject", "client_name"),
    clean=_clean_quote,
    audit_fields=("subject", "client_name", "status", "total"),
)

quote_repo = EntityRepository(Quote, QUOTE_POLICY)


class QuoteService:
    @staticmethod
    def get(*, org_id: UUID, quote_id) -> Quote:
        return quote_repo.get(org_id=org_id, entity_id=quote_id)

    @staticmethod
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict) -> Quote:
        return quote_repo.create(org_id=org_id, actor_user_id=actor_user_id, data=data)

    @staticmethod
    def update(*, org_id: UUID, quote_id, actor_user_id: int | None, data: dict) -> Quote:
        return quote_repo.update(org_id=org_id, entity_id=quote_id, actor_user_id=actor_user_id, data=data)

    @staticmethod
    def delete(*, org_id: UUID, quote_id, actor_user_id: int | None) -> bool:
        return quote_repo.delete(org_id=org_id, entity_id=quote_id, actor_user_id=actor_user_id)

    @staticmethod
    @transaction.atomic
    def set_status(*, org_id: UUID, quote_id, status: str, actor_user_id: int | None) -> Quote:
        if status not in QuoteStatus.values:
            raise ValidationError({"status": [f'Invalid value "{status}". ' + allowed_values_message(QuoteStatus.values)]})

        obj = quote_repo.get(org_id=org_id, entity_id=quote_id, for_update=True)
        if obj.status == status:
            return obj

        logger.info("quote status id=%s %s -> %s org=%s", obj.id, obj.status, status, org_id)
        return quote_repo.apply(obj=obj, updates={"status": status}, actor_user_id=actor_user_id, action="status_changed")

    @staticmethod
    def stats(*, org_id: UUID) -> dict:
        qs = quote_repo.queryset(org_id=org_id).order_by()

        by_status = {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id"))}
        agg = qs.aggregate(total_value=Sum("total"), avg_value=Avg("total"))
        accepted_value = qs.filter(status=QuoteStatus.ACCEPTED).aggregate(v=Sum("total"))["v"]

        accepted = by_status.get(QuoteStatus.ACCEPTED, 0)
        rejected = by_status.get(QuoteStatus.REJECTED, 0)
        decided = accepted + rejected

        return {
            "total": sum(by_status.values()),
            "draft": by_status.get(QuoteStatus.DRAFT, 0),
            "sent": by_status.get(QuoteStatus.SENT, 0),
            "accepted": accepted,
            "rejected": rejected,
            "total_value": float(agg["total_value"] or 0),
            "accepted_value": float(accepted_value or 0),
            "avg_value": round(float(agg["avg_value"] or 0), 2),
            "conversion_rate": round(accepted / decided * 100, 2) if decided else 0.0,
        }
