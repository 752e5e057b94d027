# backend/dw_core/change_requests/filters.py
from __future__ import annotations

import django_filters

from dw_core.change_requests.models import ChangeRequest
from dw_core.common.filters import CharInFilter


class ChangeRequestFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    risk_level = CharInFilter(field_name="risk_level", lookup_expr="in")
    impact = CharInFilter(field_name="impact", lookup_expr="in")
    category = CharInFilter(field_name="category", lookup_expr="in")
    client = django_filters.CharFilter(field_name="client", lookup_expr="iexact")
    submitted_by = django_filters.CharFilter(field_name="submitted_by", lookup_expr="iexact")

    # window on planned_start_date
    start_date = django_filters.DateTimeFilter(field_name="planned_start_date", lookup_expr="gte")
    end_date = django_filters.DateTimeFilter(field_name="planned_start_date", lookup_expr="lte")

    class Meta:
        model = ChangeRequest
        fields = []
