from rest_framework import serializers

MODE_CHOICES = ["registration", "verification"]


class ValidateBlobInputSerializer(serializers.Serializer):
    blob = serializers.CharField(allow_blank=True, trim_whitespace=False)
    mode = serializers.ChoiceField(choices=MODE_CHOICES, default="verification")


class ScoreInputSerializer(serializers.Serializer):
    blob_a = serializers.CharField(allow_blank=True, trim_whitespace=False)
    blob_b = serializers.CharField(allow_blank=True, trim_whitespace=False)
    breakdown = serializers.BooleanField(default=False)


class VerifyInputSerializer(serializers.Serializer):
    enrolled_blob = serializers.CharField(allow_blank=True, trim_whitespace=False)
    captured_blob = serializers.CharField(allow_blank=True, trim_whitespace=False)


class RosterEntrySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    blob = serializers.CharField(trim_whitespace=False)


class DuplicateCheckInputSerializer(serializers.Serializer):
    new_blob = serializers.CharField(allow_blank=True, trim_whitespace=False)
    roster = RosterEntrySerializer(many=True)
