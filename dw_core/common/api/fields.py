# backend/dw_core/common/api/fields.py
from __future__ import annotations

from rest_framework import serializers


def allowed_values_message(values) -> str:
    return "Must be one of: " + ", ".join(str(v) for v in values) + "."


class EnumChoiceField(serializers.ChoiceField):
    """
    ChoiceField whose error lists the allowed set, e.g.
    'Invalid value "Laptop". Must be one of: Server, Workstation, Network, Printer.'
    """

    def __init__(self, choices, **kwargs):
        super().__init__(choices, **kwargs)
        self.error_messages["invalid_choice"] = 'Invalid value "{input}". ' + allowed_values_message(
            list(self.choices.keys())
        )


class UUIDListField(serializers.ListField):
    """Associated-id arrays (assets, tickets). Stored as strings in JSON columns."""

    child = serializers.UUIDField()

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        out: list[str] = []
        for v in values:
            s = str(v)
            if s not in out:
                out.append(s)
        return out
