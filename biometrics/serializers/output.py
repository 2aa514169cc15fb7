from rest_framework import serializers


class ValidateBlobOutputSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    score = serializers.FloatField()
    reason = serializers.CharField()
    code = serializers.ChoiceField(choices=["OK", "MALFORMED_BLOB", "INSUFFICIENT_QUALITY"])
    header_prefix = serializers.CharField(allow_blank=True)


class ScoreOutputSerializer(serializers.Serializer):
    score = serializers.FloatField()
    reason = serializers.ChoiceField(choices=["EXACT_MATCH", "INVALID_INPUT", "COMPOSITE"])
    breakdown = serializers.DictField(required=False)


class VerifyOutputSerializer(serializers.Serializer):
    matched = serializers.BooleanField()
    score = serializers.FloatField()
    distance = serializers.FloatField()
    threshold = serializers.FloatField()
    reason_code = serializers.CharField()
    message = serializers.CharField()


class DuplicateCheckOutputSerializer(serializers.Serializer):
    is_duplicate = serializers.BooleanField()
    matched_id = serializers.CharField(allow_null=True)
    score = serializers.FloatField()
    reason_code = serializers.CharField()
    details = serializers.CharField()
