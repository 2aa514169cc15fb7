from django.contrib import admin
from .models import ApiKey

@admin.register(ApiKey)
class ApiKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "station", "key_id", "active", "is_expired", "last_used_at", "created_at", "name")
    list_filter = ("active", "station")
    search_fields = ("key_id", "station__name", "station__code", "name")
    readonly_fields = ("created_at", "last_used_at")
    exclude = ("key_secret_enc",)
