from django.contrib import admin

from .models import Candidate, VerificationAttempt, ManualVerificationRequest


@admin.register(Candidate)
class CandidateAdmin(admin.ModelAdmin):
    list_display = ("name", "party", "symbol", "vote_count")
    readonly_fields = ("vote_count",)


@admin.register(VerificationAttempt)
class VerificationAttemptAdmin(admin.ModelAdmin):
    list_display = ("voter", "station", "matched", "score", "reason_code", "created_at")
    list_filter = ("matched", "reason_code")


@admin.register(ManualVerificationRequest)
class ManualVerificationRequestAdmin(admin.ModelAdmin):
    list_display = ("voter", "station", "status", "created_at", "resolved_at")
    list_filter = ("status",)
