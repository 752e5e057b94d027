# backend/dw_core/custom_fields/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.common.api.fields import EnumChoiceField
from dw_core.custom_fields.models import CustomField, CustomFieldModule, CustomFieldType


class CustomFieldSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomField
        fields = [
            "id",
            "org_id",
            "module",
            "name",
            "key",
            "field_type",
            "required",
            "options",
            "sort_order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CustomFieldCreateSerializer(serializers.Serializer):
    module = EnumChoiceField(choices=CustomFieldModule.choices)
    name = serializers.CharField(max_length=128)
    key = serializers.CharField(max_length=64, required=False, allow_blank=True)
    field_type = EnumChoiceField(choices=CustomFieldType.choices, required=False, default=CustomFieldType.TEXT)
    required = serializers.BooleanField(required=False, default=False)
    options = serializers.ListField(child=serializers.CharField(max_length=128), required=False, default=list)
    sort_order = serializers.IntegerField(required=False, min_value=0, default=0)


class CustomFieldUpdateSerializer(serializers.Serializer):
    module = EnumChoiceField(choices=CustomFieldModule.choices, required=False)
    name = serializers.CharField(max_length=128, required=False)
    key = serializers.CharField(max_length=64, required=False)
    field_type = EnumChoiceField(choices=CustomFieldType.choices, required=False)
    required = serializers.BooleanField(required=False)
    options = serializers.ListField(child=serializers.CharField(max_length=128), required=False)
    sort_order = serializers.IntegerField(required=False, min_value=0)
