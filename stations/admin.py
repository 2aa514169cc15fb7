from django.contrib import admin
from .models import PollingStation


@admin.register(PollingStation)
class PollingStationAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "code", "region", "status", "contact_email", "created_at", "last_seen_at")
    list_filter = ("status", "region")
    search_fields = ("name", "code", "contact_email")
    readonly_fields = ("created_at", "updated_at", "last_seen_at")
