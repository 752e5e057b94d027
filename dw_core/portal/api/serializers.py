# backend/dw_core/portal/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class PortalToolSerializer(serializers.Serializer):
    name = serializers.CharField()
    description = serializers.CharField()


class PortalToolRunSerializer(serializers.Serializer):
    client = serializers.CharField(max_length=255)
    query = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class PortalToolResultSerializer(serializers.Serializer):
    tool = serializers.CharField()
    results = serializers.ListField(child=serializers.DictField())
