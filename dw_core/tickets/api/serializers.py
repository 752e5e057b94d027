# backend/dw_core/tickets/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.common.api.fields import UUIDListField
from dw_core.tickets.models import Ticket


class TicketSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ticket
        fields = [
            "id",
            "org_id",
            "subject",
            "description",
            "client",
            "assignee",
            "priority",
            "status",
            "queue",
            "activity",
            "associated_assets",
            "sla",
            "custom_fields",
            "closed_at",
            "is_deleted",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TicketWriteSerializer(serializers.Serializer):
    """
    status / priority / queue are names from the ticket settings; omitted ones
    fall back to the organization's defaults on create.
    """
    subject = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    client = serializers.CharField(max_length=255)
    assignee = serializers.CharField(max_length=255, required=False, allow_blank=True)
    priority = serializers.CharField(max_length=128, required=False)
    status = serializers.CharField(max_length=128, required=False)
    queue = serializers.CharField(max_length=128, required=False)
    associated_assets = UUIDListField(required=False)
    custom_fields = serializers.JSONField(required=False)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class TicketActivitySerializer(serializers.Serializer):
    activity = serializers.CharField(max_length=2000)


class TicketStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    open = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    by_priority = serializers.DictField(child=serializers.IntegerField())
