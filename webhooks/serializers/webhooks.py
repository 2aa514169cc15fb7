from rest_framework import serializers

from webhooks.models import WebhookConfig, WebhookDelivery
from webhooks.services.events import EVENTS


class WebhookConfigOutSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookConfig
        fields = ("id", "name", "url", "events", "active", "timeout_s", "max_retries", "backoff_s",
                  "created_at", "updated_at")
        read_only_fields = fields


class WebhookConfigUpsertSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookConfig
        fields = ("name", "url", "secret", "events", "active", "timeout_s", "max_retries", "backoff_s")
        extra_kwargs = {"secret": {"write_only": True}}

    def validate_events(self, value):
        unknown = [e for e in value if e not in EVENTS]
        if unknown:
            raise serializers.ValidationError(f"Unknown events: {', '.join(unknown)}")
        return value


class WebhookDeliveryOutSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookDelivery
        fields = (
            "id", "config", "event", "url", "attempt", "headers",
            "payload", "status_code", "ok", "error", "duration_ms", "created_at"
        )
        read_only_fields = fields
