# backend/dw_core/settings_registry/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.settings_registry.models import SettingItem, SettingKind

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class SettingItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SettingItem
        fields = [
            "id",
            "org_id",
            "module",
            "kind",
            "name",
            "color",
            "description",
            "sort_order",
            "is_default",
            "is_system",
            "is_active",
            "in_use_count",
            "metadata",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SettingItemCreateSerializer(serializers.Serializer):
    # validated against the module's kinds in the service
    kind = serializers.ChoiceField(choices=SettingKind.choices, required=False)
    type = serializers.ChoiceField(choices=SettingKind.choices, required=False, write_only=True)

    name = serializers.CharField(max_length=128)
    color = serializers.RegexField(HEX_COLOR, required=False, default="#6b7280")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    sort_order = serializers.IntegerField(required=False, min_value=0, default=0)
    is_default = serializers.BooleanField(required=False, default=False)
    is_active = serializers.BooleanField(required=False, default=True)
    metadata = serializers.JSONField(required=False, default=dict)

    def validate(self, attrs):
        kind = attrs.pop("type", None)
        attrs.setdefault("kind", kind)
        if not attrs.get("kind"):
            raise serializers.ValidationError({"kind": ["This field is required."]})
        return attrs


class SettingItemUpdateSerializer(serializers.Serializer):
    """
    Partial update contract. `kind` is accepted only to reject a change.
    """
    kind = serializers.ChoiceField(choices=SettingKind.choices, required=False)
    name = serializers.CharField(max_length=128, required=False)
    color = serializers.RegexField(HEX_COLOR, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    sort_order = serializers.IntegerField(required=False, min_value=0)
    is_default = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)
    metadata = serializers.JSONField(required=False)


class SettingStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    in_use = serializers.IntegerField()
    total_usage = serializers.IntegerField()
    by_kind = serializers.DictField(child=serializers.IntegerField())
