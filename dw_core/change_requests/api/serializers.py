# backend/dw_core/change_requests/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.assets.api.serializers import AssetSerializer
from dw_core.change_requests.models import ChangeApproval, ChangeRequest, ChangeStatus, ImpactLevel, RiskLevel
from dw_core.common.api.fields import EnumChoiceField, UUIDListField
from dw_core.tickets.api.serializers import TicketSerializer


class ChangeRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChangeRequest
        fields = [
            "id",
            "org_id",
            "title",
            "description",
            "client",
            "category",
            "status",
            "risk_level",
            "impact",
            "planned_start_date",
            "planned_end_date",
            "actual_start_date",
            "actual_end_date",
            "submitted_by",
            "change_plan",
            "rollback_plan",
            "test_plan",
            "associated_assets",
            "associated_tickets",
            "approved_by",
            "approved_at",
            "rejected_by",
            "rejected_at",
            "rejection_reason",
            "risk_score",
            "requires_approval",
            "requires_testing",
            "requires_rollback_plan",
            "is_deleted",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ChangeRequestWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    client = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=128, required=False, allow_blank=True)
    status = EnumChoiceField(choices=ChangeStatus.choices, required=False)
    risk_level = EnumChoiceField(choices=RiskLevel.choices)
    impact = EnumChoiceField(choices=ImpactLevel.choices)
    planned_start_date = serializers.DateTimeField()
    planned_end_date = serializers.DateTimeField()
    submitted_by = serializers.CharField(max_length=255, required=False)
    change_plan = serializers.CharField(required=False, allow_blank=True)
    rollback_plan = serializers.CharField(required=False, allow_blank=True)
    test_plan = serializers.CharField(required=False, allow_blank=True)
    associated_assets = UUIDListField(required=False)
    associated_tickets = UUIDListField(required=False)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class ApproveSerializer(serializers.Serializer):
    approved_by = serializers.CharField(max_length=255, required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True)


class RejectSerializer(serializers.Serializer):
    rejected_by = serializers.CharField(max_length=255, required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ChangeApprovalSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChangeApproval
        fields = ["id", "change_request", "approver", "decision", "reason", "decided_at"]
        read_only_fields = fields


class ChangeRequestLinksSerializer(serializers.Serializer):
    assets = AssetSerializer(many=True)
    tickets = TicketSerializer(many=True)


class ChangeRequestStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending_approval = serializers.IntegerField()
    approved = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    completed = serializers.IntegerField()
    rejected = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    by_risk_level = serializers.DictField(child=serializers.IntegerField())
    by_impact = serializers.DictField(child=serializers.IntegerField())
