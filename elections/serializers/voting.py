from rest_framework import serializers

from ..models import ManualVerificationRequest


class CredentialsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    aadhaar_number = serializers.CharField(max_length=32)
    voter_id = serializers.CharField(max_length=32)


class VerifyVoterInputSerializer(CredentialsSerializer):
    face_data = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ManualVerificationInputSerializer(CredentialsSerializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class CastVoteInputSerializer(serializers.Serializer):
    ballot_token = serializers.CharField()
    candidate_id = serializers.IntegerField(min_value=1)


class ReviewInputSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="")


class ManualVerificationOutSerializer(serializers.ModelSerializer):
    voter_id = serializers.CharField(source="voter.voter_id", read_only=True)
    voter_name = serializers.CharField(source="voter.name", read_only=True)
    station = serializers.SlugRelatedField(slug_field="code", read_only=True)

    class Meta:
        model = ManualVerificationRequest
        fields = ("id", "voter_id", "voter_name", "station", "remarks", "status", "review_note",
                  "resolved_by", "resolved_at", "created_at")
        read_only_fields = fields


class ResultRowSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    party = serializers.CharField()
    symbol = serializers.CharField()
    vote_count = serializers.IntegerField()
    percentage = serializers.FloatField()


class ResultsOutputSerializer(serializers.Serializer):
    candidates = ResultRowSerializer(many=True)
    total_votes = serializers.IntegerField()
    registered_voters = serializers.IntegerField()
    turnout = serializers.FloatField()
    winner = ResultRowSerializer(allow_null=True)
