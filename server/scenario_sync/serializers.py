from __future__ import annotations

from rest_framework import serializers

from .models import ScenarioReport


class SharedDataSerializer(serializers.Serializer):
    situations = serializers.ListField()
    scenarios = serializers.ListField()


class StatePutSerializer(serializers.Serializer):
    # only ``data`` is checked; a non-string clientId is simply not echoed
    clientId = serializers.JSONField(required=False)
    baseVersion = serializers.JSONField(required=False)
    data = SharedDataSerializer()


class ScenarioReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = ScenarioReport
        fields = [
            "id",
            "created_at",
            "snapshot_version",
            "status",
            "result_path",
            "error",
        ]
