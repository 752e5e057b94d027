# backend/dw_core/assets/filters.py
from __future__ import annotations

from datetime import timedelta

import django_filters
from django.utils import timezone

from dw_core.assets.models import Asset
from dw_core.common.filters import BooleanFlagFilter, CharInFilter


class AssetFilter(django_filters.FilterSet):
    type = CharInFilter(field_name="type", lookup_expr="in")
    status = CharInFilter(field_name="status", lookup_expr="in")
    category = CharInFilter(field_name="category", lookup_expr="in")
    is_secure = BooleanFlagFilter(field_name="is_secure")
    client = django_filters.CharFilter(field_name="client", lookup_expr="icontains")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    maintenance_due = BooleanFlagFilter(method="filter_maintenance_due")
    warranty_expiring = django_filters.NumberFilter(method="filter_warranty_expiring")

    class Meta:
        model = Asset
        fields = []

    def filter_maintenance_due(self, qs, name, value):
        if not value:
            return qs
        return qs.filter(next_maintenance_date__lte=timezone.localdate())

    def filter_warranty_expiring(self, qs, name, value):
        if value is None:
            return qs
        today = timezone.localdate()
        return qs.filter(
            warranty_expiration__gte=today,
            warranty_expiration__lte=today + timedelta(days=int(value)),
        )
