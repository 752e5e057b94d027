# backend/dw_core/quotes/filters.py
from __future__ import annotations

import django_filters

from dw_core.common.filters import CharInFilter
from dw_core.quotes.models import Quote


class QuoteFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    client_id = django_filters.CharFilter(field_name="client_id", lookup_expr="exact")
    client_name = django_filters.CharFilter(field_name="client_name", lookup_expr="icontains")

    class Meta:
        model = Quote
        fields = []
