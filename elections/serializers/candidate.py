from rest_framework import serializers

from ..models import Candidate


class CandidateOutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Candidate
        fields = ("id", "name", "party", "symbol", "vote_count", "created_at")
        read_only_fields = fields


class CandidateUpsertSerializer(serializers.ModelSerializer):
    class Meta:
        model = Candidate
        fields = ("name", "party", "symbol")
