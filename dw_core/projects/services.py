# backend/dw_core/projects/services.py
from __future__ import annotations

import logging
from datetime import date, timedelta
from uuid import UUID

from django.db import transaction
from django.db.models import Avg, Count, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from dw_core.common.repository import EntityPolicy, EntityRepository
from dw_core.projects.models import Project, ProjectStatus

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 30


def _as_date(value):
    if isinstance(value, str):
        return parse_date(value)
    return value


def _clean_project(*, org_id: UUID, data: dict, instance=None) -> dict:
    start = _as_date(data.get("start_date", getattr(instance, "start_date", None)))
    end = _as_date(data.get("end_date", getattr(instance, "end_date", None)))
    if isinstance(start, date) and isinstance(end, date) and end < start:
        raise ValidationError({"end_date": ["End date must not be before start date."]})
    return data


PROJECT_POLICY = EntityPolicy(
    entity_type="Project",
    event_prefix="projects.project",
    writable_fields=frozenset(
        {
            "name", "description", "client", "status",
            "start_date", "end_date",
            "budget_total", "budget_used", "progress",
            "team_members", "tags",
        }
    ),
    search_fields=("name", "description", "client"),
    usage_module="project",
    clean=_clean_project,
    audit_fields=("name", "status", "client"),
)

project_repo = EntityRepository(Project, PROJECT_POLICY)


def _status_stamps(obj: Project | None, new_status: str) -> dict:
    """Dates and progress implied by entering `new_status`."""
    now = timezone.now()
    stamps: dict = {}
    if new_status == ProjectStatus.IN_PROGRESS:
        if obj is None or obj.actual_start_date is None:
            stamps["actual_start_date"] = now
    elif new_status == ProjectStatus.COMPLETED:
        stamps["actual_end_date"] = now
        stamps["progress"] = 100
    elif new_status == ProjectStatus.CANCELLED:
        stamps["actual_end_date"] = now
    return stamps


class ProjectService:
    @staticmethod
    def get(*, org_id: UUID, project_id) -> Project:
        return project_repo.get(org_id=org_id, entity_id=project_id)

    @staticmethod
    @transaction.atomic
    def create(*, org_id: UUID, actor_user_id: int | None, data: dict) -> Project:
        status = data.get("status") or ProjectStatus.NOT_STARTED
        return project_repo.create(
            org_id=org_id,
            actor_user_id=actor_user_id,
            data=data,
            extra=_status_stamps(None, status),
        )

    @staticmethod
    @transaction.atomic
    def update(*, org_id: UUID, project_id, actor_user_id: int | None, data: dict) -> Project:
        obj = project_repo.get(org_id=org_id, entity_id=project_id, for_update=True)
        updates = _clean_project(
            org_id=org_id,
            data={k: v for k, v in data.items() if k in PROJECT_POLICY.writable_fields},
            instance=obj,
        )

        new_status = updates.get("status")
        action = "updated"
        if new_status and new_status != obj.status:
            updates.update(_status_stamps(obj, new_status))
            action = "status_changed"
            logger.info("project status id=%s %s -> %s org=%s", obj.id, obj.status, new_status, org_id)

        return project_repo.apply(obj=obj, updates=updates, actor_user_id=actor_user_id, action=action)

    @staticmethod
    def delete(*, org_id: UUID, project_id, actor_user_id: int | None) -> bool:
        return project_repo.delete(org_id=org_id, entity_id=project_id, actor_user_id=actor_user_id)

    @staticmethod
    def upcoming(*, org_id: UUID, days: int = UPCOMING_DAYS):
        today = timezone.localdate()
        return (
            project_repo.queryset(org_id=org_id)
            .filter(
                status__in=[ProjectStatus.NOT_STARTED, ProjectStatus.IN_PROGRESS],
                start_date__gte=today,
                start_date__lte=today + timedelta(days=days),
            )
            .order_by("start_date")
        )

    @staticmethod
    def stats(*, org_id: UUID) -> dict:
        qs = project_repo.queryset(org_id=org_id).order_by()

        by_status = {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id"))}
        agg = qs.aggregate(total_budget=Sum("budget_total"), used_budget=Sum("budget_used"), avg=Avg("progress"))

        return {
            "total": sum(by_status.values()),
            "not_started": by_status.get(ProjectStatus.NOT_STARTED, 0),
            "in_progress": by_status.get(ProjectStatus.IN_PROGRESS, 0),
            "on_hold": by_status.get(ProjectStatus.ON_HOLD, 0),
            "completed": by_status.get(ProjectStatus.COMPLETED, 0),
            "cancelled": by_status.get(ProjectStatus.CANCELLED, 0),
            "total_budget": float(agg["total_budget"] or 0),
            "used_budget": float(agg["used_budget"] or 0),
            "average_progress": round(agg["avg"] or 0),
        }
