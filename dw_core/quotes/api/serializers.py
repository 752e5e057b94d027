# backend/dw_core/quotes/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.common.api.fields import EnumChoiceField
from dw_core.quotes.models import Quote, QuoteStatus


class QuoteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Quote
        fields = [
            "id",
            "org_id",
            "subject",
            "client_name",
            "client_id",
            "status",
            "expiry_date",
            "line_items",
            "total",
            "is_deleted",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class QuoteLineItemSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class QuoteWriteSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=255)
    client_name = serializers.CharField(max_length=255)
    client_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    status = EnumChoiceField(choices=QuoteStatus.choices, required=False)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    line_items = QuoteLineItemSerializer(many=True, required=False)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class QuoteStatusSerializer(serializers.Serializer):
    status = EnumChoiceField(choices=QuoteStatus.choices)


class QuoteStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    draft = serializers.IntegerField()
    sent = serializers.IntegerField()
    accepted = serializers.IntegerField()
    rejected = serializers.IntegerField()
    total_value = serializers.FloatField()
    accepted_value = serializers.FloatField()
    avg_value = serializers.FloatField()
    conversion_rate = serializers.FloatField()
