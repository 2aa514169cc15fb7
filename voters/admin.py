from django.contrib import admin
from .models import Voter


@admin.register(Voter)
class VoterAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "voter_id", "masked_aadhaar", "station", "has_voted", "voted_at", "created_at")
    list_filter = ("has_voted", "station")
    search_fields = ("name", "voter_id")
    readonly_fields = ("created_at", "updated_at", "voted_at", "voted_station")
    exclude = ("face_data", "iris_data")
