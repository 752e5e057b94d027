# backend/dw_core/projects/filters.py
from __future__ import annotations

import django_filters

from dw_core.common.filters import CharInFilter
from dw_core.projects.models import Project


def _members_matching(qs, field: str, value: str):
    # case-insensitive JSON list membership; JSONField __contains is unavailable on SQLite
    wanted = value.strip().lower()
    ids = [
        pk for pk, values in qs.values_list("id", field)
        if any(str(v).lower() == wanted for v in (values or []))
    ]
    return qs.filter(id__in=ids)


class ProjectFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    client = django_filters.CharFilter(field_name="client", lookup_expr="icontains")
    team_member = django_filters.CharFilter(method="filter_team_member")
    tag = django_filters.CharFilter(method="filter_tag")

    # window on start_date
    start_date = django_filters.DateFilter(field_name="start_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")

    class Meta:
        model = Project
        fields = []

    def filter_team_member(self, qs, name, value):
        return _members_matching(qs, "team_members", value) if value else qs

    def filter_tag(self, qs, name, value):
        return _members_matching(qs, "tags", value) if value else qs
