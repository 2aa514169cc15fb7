from rest_framework import serializers

from ..models import Voter


class VoterOutSerializer(serializers.ModelSerializer):
    """Les captures ne sont jamais renvoyées, seulement leur longueur."""
    aadhaar_number = serializers.CharField(source="masked_aadhaar")
    station = serializers.SlugRelatedField(slug_field="code", read_only=True)
    face_data_length = serializers.SerializerMethodField()
    iris_data_length = serializers.SerializerMethodField()

    class Meta:
        model = Voter
        fields = (
            "id", "name", "voter_id", "aadhaar_number", "address", "station",
            "has_voted", "voted_at", "face_data_length", "iris_data_length",
            "created_at", "updated_at",
        )
        read_only_fields = fields

    def get_face_data_length(self, obj: Voter) -> int:
        return len(obj.face_data or "")

    def get_iris_data_length(self, obj: Voter) -> int:
        return len(obj.iris_data or "")
