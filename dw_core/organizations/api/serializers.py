# backend/dw_core/organizations/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dw_core.common.api.fields import EnumChoiceField
from dw_core.organizations.models import BillingCycle, Organization, SubscriptionStatus, SubscriptionTier


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Organization
        fields = [
            "id",
            "workos_org_id",
            "name",
            "subdomain",
            "time_zone",
            "is_internal_it_mode",
            "enabled_modules",
            "features",
            "settings",
            "subscription_tier",
            "subscription_status",
            "billing_cycle",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrganizationUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). `features` and `settings` are merged key-by-key.
    """
    name = serializers.CharField(max_length=255, required=False)
    time_zone = serializers.CharField(max_length=64, required=False)
    is_internal_it_mode = serializers.BooleanField(required=False)
    features = serializers.DictField(required=False)
    settings = serializers.DictField(required=False)
    subscription_tier = EnumChoiceField(choices=SubscriptionTier.choices, required=False)
    subscription_status = EnumChoiceField(choices=SubscriptionStatus.choices, required=False)
    billing_cycle = EnumChoiceField(choices=BillingCycle.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class ModuleSettingsSerializer(serializers.Serializer):
    enabled_modules = serializers.DictField(child=serializers.BooleanField())
    is_internal_it_mode = serializers.BooleanField()


class ModuleSettingsUpdateSerializer(serializers.Serializer):
    # checked in the service so unknown ids get a precise message
    enabled_modules = serializers.JSONField()
    is_internal_it_mode = serializers.BooleanField(required=False)


class SetupUserRequestSerializer(serializers.Serializer):
    workos_org_id = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")


class SetupUserResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    organization_id = serializers.UUIDField()
    organization_name = serializers.CharField(required=False)
    message = serializers.CharField()
    requires_session_refresh = serializers.BooleanField(required=False)
