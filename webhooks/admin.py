from django.contrib import admin

from .models import WebhookConfig, WebhookDelivery


@admin.register(WebhookConfig)
class WebhookConfigAdmin(admin.ModelAdmin):
    list_display = ("name", "url", "active", "max_retries", "updated_at")
    list_filter = ("active",)


@admin.register(WebhookDelivery)
class WebhookDeliveryAdmin(admin.ModelAdmin):
    list_display = ("event", "url", "attempt", "status_code", "ok", "created_at")
    list_filter = ("ok", "event")
    readonly_fields = [f.name for f in WebhookDelivery._meta.fields]
