# backend/dw_core/tickets/filters.py
from __future__ import annotations

import django_filters

from dw_core.common.filters import CharInFilter
from dw_core.tickets.models import Ticket


class TicketFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    priority = CharInFilter(field_name="priority", lookup_expr="in")
    queue = CharInFilter(field_name="queue", lookup_expr="in")
    assignee = django_filters.CharFilter(field_name="assignee", lookup_expr="iexact")
    client = django_filters.CharFilter(field_name="client", lookup_expr="icontains")

    class Meta:
        model = Ticket
        fields = []
