# backend/dw_core/projects/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.common.api.fields import EnumChoiceField
from dw_core.projects.models import Project, ProjectStatus


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = [
            "id",
            "org_id",
            "name",
            "description",
            "client",
            "status",
            "start_date",
            "end_date",
            "actual_start_date",
            "actual_end_date",
            "budget_total",
            "budget_used",
            "progress",
            "team_members",
            "tags",
            "is_deleted",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProjectWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    client = serializers.CharField(max_length=255)
    status = EnumChoiceField(choices=ProjectStatus.choices, required=False)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    budget_total = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    budget_used = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    progress = serializers.IntegerField(min_value=0, max_value=100, required=False)
    team_members = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=64), required=False)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class ProjectStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    not_started = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    on_hold = serializers.IntegerField()
    completed = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    total_budget = serializers.FloatField()
    used_budget = serializers.FloatField()
    average_progress = serializers.IntegerField()
