# backend/dw_core/inventory/filters.py
from __future__ import annotations

import django_filters
from django.db.models import F

from dw_core.common.filters import BooleanFlagFilter, CharInFilter
from dw_core.inventory.models import InventoryItem


class InventoryItemFilter(django_filters.FilterSet):
    category = CharInFilter(field_name="category", lookup_expr="in")
    owner = CharInFilter(field_name="owner", lookup_expr="in")
    supplier = CharInFilter(field_name="supplier", lookup_expr="in")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    low_stock = BooleanFlagFilter(method="filter_low_stock")
    out_of_stock = BooleanFlagFilter(method="filter_out_of_stock")

    class Meta:
        model = InventoryItem
        fields = []

    def filter_low_stock(self, qs, name, value):
        return qs.filter(quantity__lte=F("reorder_point")) if value else qs

    def filter_out_of_stock(self, qs, name, value):
        return qs.filter(quantity__lte=0) if value else qs
