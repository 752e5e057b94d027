# backend/dw_core/audit/api/serializers.py
from rest_framework import serializers

from dw_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # API field name "timestamp" maps to the model's "occurred_at"
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)
    actor_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "org_id",
            "entity_type",
            "entity_id",
            "event_code",
            "actor_user_id",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields
