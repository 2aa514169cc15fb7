from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse

from ..serializers.input import ValidateBlobInputSerializer
from ..serializers.output import ValidateBlobOutputSerializer
from ..services.validator import validate_image_blob


@extend_schema(
    tags=["Biometrics"],
    request=ValidateBlobInputSerializer,
    responses={200: OpenApiResponse(ValidateBlobOutputSerializer)},
    examples=[OpenApiExample("Réponse", value={"valid": False, "score": 0.0, "code": "MALFORMED_BLOB",
                                               "reason": "Invalid image format - not a data URL",
                                               "header_prefix": ""}, response_only=True)]
)
class ValidateBlobView(APIView):
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = ValidateBlobInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        res = validate_image_blob(ser.validated_data["blob"], ser.validated_data["mode"])
        return Response({"valid": res.valid, "score": res.score, "reason": res.reason, "code": res.code,
                         "header_prefix": res.header_prefix}, status=200)
