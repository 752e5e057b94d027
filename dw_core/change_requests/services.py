# backend/dw_core/change_requests/services.py
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework.exceptions import ValidationError

from dw_core.assets.services import asset_repo
from dw_core.change_requests.models import ApprovalDecision, ChangeApproval, ChangeRequest, ChangeStatus
from dw_core.common.api.exceptions import ConflictError
from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.settings_registry.selectors import canonical_name, find_setting
from dw_core.tickets.services import ticket_repo

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7
RISK_POINTS_PER_APPROVER = 25

# status moves allowed through a plain update; approve/reject have their own actions
UPDATE_TRANSITIONS = {
    ChangeStatus.PENDING_APPROVAL: {ChangeStatus.CANCELLED},
    ChangeStatus.APPROVED: {ChangeStatus.IN_PROGRESS, ChangeStatus.CANCELLED},
    ChangeStatus.IN_PROGRESS: {ChangeStatus.COMPLETED, ChangeStatus.CANCELLED},
}

MODULE = "change_management"


def _as_datetime(value):
    if isinstance(value, str):
        return parse_datetime(value)
    return value


def _enrich_from_settings(*, org_id: UUID, data: dict) -> dict:
    if "category" in data:
        setting = find_setting(org_id=org_id, module=MODULE, kind="category", name=data["category"])
        meta = (setting.metadata or {}) if setting else {}
        data["requires_approval"] = bool(meta.get("requires_approval", True))
        data["requires_testing"] = bool(meta.get("requires_testing", False))
        data["requires_rollback_plan"] = bool(meta.get("requires_rollback_plan", False))

    if "risk_level" in data:
        setting = find_setting(org_id=org_id, module=MODULE, kind="risk", name=data["risk_level"])
        approvers = int((setting.metadata or {}).get("required_approvers") or 0) if setting else 0
        data["risk_score"] = approvers * RISK_POINTS_PER_APPROVER

    return data


def _clean_change(*, org_id: UUID, data: dict, instance=None) -> dict:
    if data.get("category"):
        data["category"] = canonical_name(
            org_id=org_id, module=MODULE, kind="category", value=data["category"], field="category"
        )

    start = _as_datetime(data.get("planned_start_date", getattr(instance, "planned_start_date", None)))
    end = _as_datetime(data.get("planned_end_date", getattr(instance, "planned_end_date", None)))
    if start and end and end < start:
        raise ValidationError({"planned_end_date": ["Planned end must not be before planned start."]})

    return _enrich_from_settings(org_id=org_id, data=data)


CHANGE_POLICY = EntityPolicy(
    entity_type="ChangeRequest",
    event_prefix="change_requests.change_request",
    writable_fields=frozenset(
        {
            "title", "description", "client", "category", "status",
            "risk_level", "impact",
            "planned_start_date", "planned_end_date",
            "submitted_by", "change_plan", "rollback_plan", "test_plan",
            "associated_assets", "associated_tickets",
        }
    ),
    search_fields=("title", "description", "client", "submitted_by", "category"),
    usage_module=MODULE,
    clean=_clean_change,
    audit_fields=("title", "status", "risk_level"),
)

change_repo = EntityRepository(ChangeRequest, CHANGE_POLICY)


def _require_pending(obj: ChangeRequest, verb: str) -> None:
    if obj.status != ChangeStatus.PENDING_APPROVAL:
        logger.warning("change %s rejected: id=%s status=%s", verb, obj.id, obj.status)
        raise ConflictError(
            f'Only change requests in "{ChangeStatus.PENDING_APPROVAL}" can be {verb}; current status is "{obj.status}".'
        )


class ChangeRequestService:
    @staticmethod
    def get(*, org_id: UUID, change_id) -> ChangeRequest:
        return change_repo.get(org_id=org_id, entity_id=change_id)

    @staticmethod
    @transaction.atomic
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict) -> ChangeRequest:
        status = data.get("status")
        if status and status != ChangeStatus.PENDING_APPROVAL:
            raise ValidationError({"status": [f'New change requests start in "{ChangeStatus.PENDING_APPROVAL}".']})

        data = {**data, "status": ChangeStatus.PENDING_APPROVAL}
        obj = change_repo.create(org_id=org_id, actor_user_id=actor_user_id, data=data)
        logger.info("change request submitted id=%s risk=%s org=%s", obj.id, obj.risk_level, org_id)
        return obj

    @staticmethod
    @transaction.atomic
    def update(*, org_id: UUID, change_id, actor_user_id: int | None, data: dict) -> ChangeRequest:
        obj = change_repo.get(org_id=org_id, entity_id=change_id, for_update=True)
        updates = {k: v for k, v in data.items() if k in CHANGE_POLICY.writable_fields}

        new_status = updates.get("status")
        if new_status and new_status != obj.status:
            if new_status not in UPDATE_TRANSITIONS.get(obj.status, set()):
                logger.warning("illegal change transition id=%s %s -> %s", obj.id, obj.status, new_status)
                raise ConflictError(f'Cannot change status from "{obj.status}" to "{new_status}".')

            now = timezone.now()
            if new_status == ChangeStatus.IN_PROGRESS and obj.actual_start_date is None:
                updates["actual_start_date"] = now
            elif new_status == ChangeStatus.COMPLETED:
                updates["actual_end_date"] = now
        else:
            updates.pop("status", None)

        updates = _clean_change(org_id=org_id, data=updates, instance=obj)
        action = "status_changed" if "status" in updates else "updated"
        return change_repo.apply(obj=obj, updates=updates, actor_user_id=actor_user_id, action=action)

    @staticmethod
    def delete(*, org_id: UUID, change_id, actor_user_id: int | None) -> bool:
        return change_repo.delete(org_id=org_id, entity_id=change_id, actor_user_id=actor_user_id)

    # -------------------------
    # Approval workflow
    # -------------------------
    @staticmethod
    @transaction.atomic
    def approve(
        *,
        org_id: UUID,
        change_id,
        approved_by: str,
        actor_user_id: int | None,
        reason: Optional[str] = None,
    ) -> ChangeRequest:
        if not (approved_by or "").strip():
            raise ValidationError({"approved_by": ["This field is required."]})

        obj = change_repo.get(org_id=org_id, entity_id=change_id, for_update=True)
        _require_pending(obj, "approved")

        now = timezone.now()
        ChangeApproval.objects.create(
            org_id=org_id,
            change_request=obj,
            approver=approved_by.strip(),
            approver_user_id=actor_user_id,
            decision=ApprovalDecision.APPROVED,
            reason=(reason or "").strip(),
            decided_at=now,
        )

        change_repo.apply(
            obj=obj,
            updates={"status": ChangeStatus.APPROVED, "approved_by": approved_by.strip(), "approved_at": now},
            actor_user_id=actor_user_id,
            action="approved",
        )
        logger.info("change request approved id=%s by=%s org=%s", obj.id, approved_by, org_id)
        return obj

    @staticmethod
    @transaction.atomic
    def reject(
        *,
        org_id: UUID,
        change_id,
        rejected_by: str,
        reason: str,
        actor_user_id: int | None,
    ) -> ChangeRequest:
        if not (reason or "").strip():
            raise ValidationError({"reason": ["A rejection reason is required."]})
        if not (rejected_by or "").strip():
            raise ValidationError({"rejected_by": ["This field is required."]})

        obj = change_repo.get(org_id=org_id, entity_id=change_id, for_update=True)
        _require_pending(obj, "rejected")

        now = timezone.now()
        ChangeApproval.objects.create(
            org_id=org_id,
            change_request=obj,
            approver=rejected_by.strip(),
            approver_user_id=actor_user_id,
            decision=ApprovalDecision.REJECTED,
            reason=reason.strip(),
            decided_at=now,
        )

        change_repo.apply(
            obj=obj,
            updates={
                "status": ChangeStatus.REJECTED,
                "rejected_by": rejected_by.strip(),
                "rejected_at": now,
                "rejection_reason": reason.strip(),
            },
            actor_user_id=actor_user_id,
            action="rejected",
        )
        logger.info("change request rejected id=%s by=%s org=%s", obj.id, rejected_by, org_id)
        return obj

    @staticmethod
    def approvals(*, org_id: UUID, change_id):
        obj = change_repo.get(org_id=org_id, entity_id=change_id)
        return ChangeApproval.objects.filter(org_id=org_id, change_request=obj).order_by("-decided_at")

    # -------------------------
    # Reads
    # -------------------------
    @staticmethod
    def links(*, org_id: UUID, change_id) -> dict:
        """Associated assets and tickets, resolved against live rows of the same organization."""
        obj = change_repo.get(org_id=org_id, entity_id=change_id)
        return {
            "assets": asset_repo.live_ids(org_id=org_id, ids=obj.associated_assets),
            "tickets": ticket_repo.live_ids(org_id=org_id, ids=obj.associated_tickets),
        }

    @staticmethod
    def upcoming(*, org_id: UUID, days: int = UPCOMING_DAYS):
        now = timezone.now()
        return (
            change_repo.queryset(org_id=org_id)
            .filter(
                status__in=[ChangeStatus.APPROVED, ChangeStatus.IN_PROGRESS],
                planned_start_date__gte=now,
                planned_start_date__lte=now + timedelta(days=days),
            )
            .order_by("planned_start_date")
        )

    @staticmethod
    def stats(*, org_id: UUID) -> dict:
        qs = change_repo.queryset(org_id=org_id).order_by()

        def _group(field: str) -> dict:
            return {row[field]: row["n"] for row in qs.values(field).annotate(n=Count("id"))}

        by_status = _group("status")
        return {
            "total": sum(by_status.values()),
            "pending_approval": by_status.get(ChangeStatus.PENDING_APPROVAL, 0),
            "approved": by_status.get(ChangeStatus.APPROVED, 0),
            "in_progress": by_status.get(ChangeStatus.IN_PROGRESS, 0),
            "completed": by_status.get(ChangeStatus.COMPLETED, 0),
            "rejected": by_status.get(ChangeStatus.REJECTED, 0),
            "by_status": by_status,
            "by_risk_level": _group("risk_level"),
            "by_impact": _group("impact"),
        }
