# backend/dw_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class OrganizationMembershipSerializer(serializers.Serializer):
    org_id = serializers.UUIDField()
    org_name = serializers.CharField()
    subdomain = serializers.CharField()
    role_code = serializers.CharField()
    role_name = serializers.CharField()
    is_primary = serializers.BooleanField()


class LoginResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    organizations = OrganizationMembershipSerializer(many=True)


class RefreshResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class LogoutResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False, allow_blank=True)
    is_superuser = serializers.BooleanField()


class ActiveOrgSerializer(serializers.Serializer):
    org_id = serializers.UUIDField()
    role_code = serializers.CharField(allow_null=True)
    enabled_modules = serializers.DictField(child=serializers.BooleanField())
    is_internal_it_mode = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    organizations = OrganizationMembershipSerializer(many=True)
    active_org = ActiveOrgSerializer(allow_null=True, required=False)
