from rest_framework import serializers


class RegisterVoterInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    aadhaar_number = serializers.CharField(max_length=32)
    voter_id = serializers.CharField(max_length=32)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    face_data = serializers.CharField(allow_blank=True, trim_whitespace=False)   # data:image/jpeg;base64,...
    iris_data = serializers.CharField(allow_blank=True, trim_whitespace=False)


class VoterUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False)
    address = serializers.CharField(required=False, allow_blank=True)
    aadhaar_number = serializers.CharField(max_length=32, required=False)
    voter_id = serializers.CharField(max_length=32, required=False)
