from rest_framework import serializers
from ..models import PollingStation


class StationOutSerializer(serializers.ModelSerializer):
    class Meta:
        model = PollingStation
        fields = (
            "id", "name", "code", "region", "contact_email", "status",
            "created_at", "updated_at", "last_seen_at",
        )
        read_only_fields = fields


class StationCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PollingStation
        fields = ("name", "code", "region", "contact_email")


class StationUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PollingStation
        fields = ("name", "region", "contact_email", "status")
