# backend/dw_core/common/filters.py
from __future__ import annotations

import django_filters
from django import forms
from rest_framework.exceptions import ValidationError

TRUE_VALUES = {"1", "true", "yes"}
FALSE_VALUES = {"0", "false", "no"}


def truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


class FlagField(forms.CharField):
    """Query-string boolean: true/false/1/0 (yes/no too). Blank means unset."""

    def to_python(self, value):
        value = super().to_python(value)
        if value in (None, ""):
            return None
        flag = value.strip().lower()
        if flag in TRUE_VALUES:
            return True
        if flag in FALSE_VALUES:
            return False
        raise forms.ValidationError("Expected one of: true, false, 1, 0.")


class BooleanFlagFilter(django_filters.Filter):
    field_class = FlagField


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    """
    Comma-split multi-value filter: ?status=Online,Warning
    """

    def filter(self, qs, value):
        if value:
            value = [v.strip() for v in value if v and v.strip()]
        return super().filter(qs, value)


def apply_filterset(filterset_class, params, queryset):
    """
    Runs a FilterSet against an already org-scoped queryset.
    All declared filters compose conjunctively; bad values become a 400.
    """
    fs = filterset_class(data=params, queryset=queryset)
    if not fs.is_valid():
        raise ValidationError(
            {name: [e["message"] for e in errs] for name, errs in fs.errors.get_json_data().items()}
        )
    return fs.qs


SEARCH_LIMIT = 50


def filter_entities(request, *, repo, org_id, filterset_class=None):
    """
    Shared list pipeline for entity endpoints:
      include_deleted -> module FilterSet -> ?search= (capped at SEARCH_LIMIT)
    """
    params = request.query_params
    qs = repo.queryset(org_id=org_id, include_deleted=truthy(params.get("include_deleted", "")))

    if filterset_class is not None:
        qs = apply_filterset(filterset_class, params, qs)

    term = (params.get("search") or "").strip()
    if term:
        qs = repo.search(org_id=org_id, text=term, limit=SEARCH_LIMIT, queryset=qs)
    return qs
