# backend/dw_core/settings_registry/usage.py
"""
Usage counters: entity apps tell the registry how to count live rows that
reference a setting by name.

Registered from each entity app's AppConfig.ready():

    register_usage_counter("asset", "location", field_counter(Asset, "location"))
"""
from __future__ import annotations

from collections import defaultdict
from typing import Callable, Dict, List, Tuple
from uuid import UUID

# counter(org_id, name) -> number of live rows using `name`
UsageCounter = Callable[[UUID, str], int]

_counters: Dict[Tuple[str, str], List[UsageCounter]] = defaultdict(list)


def register_usage_counter(module: str, kind: str, counter: UsageCounter) -> None:
    key = (str(module), str(kind))
    names = {getattr(c, "__qualname__", repr(c)) for c in _counters[key]}
    if getattr(counter, "__qualname__", repr(counter)) not in names:
        _counters[key].append(counter)


def has_usage_counter(module: str, kind: str) -> bool:
    return bool(_counters.get((str(module), str(kind))))


def count_usage(*, org_id: UUID, module: str, kind: str, name: str) -> int:
    return sum(counter(org_id, name) for counter in _counters.get((str(module), str(kind)), []))


def field_counter(model, field_name: str) -> UsageCounter:
    """Counts live rows of `model` whose `field_name` equals the setting name (case-insensitive)."""

    def _count(org_id: UUID, name: str) -> int:
        return (
            model.objects.filter(org_id=org_id, is_deleted=False)
            .filter(**{f"{field_name}__iexact": name})
            .count()
        )

    _count.__qualname__ = f"count_{model.__name__}_{field_name}"
    return _count
