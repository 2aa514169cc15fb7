from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse

from ..serializers.input import RegisterVoterInputSerializer
from ..serializers.voter import VoterOutSerializer
from ..services.locking import EnrollmentBusy
from ..services.registration import register_voter

STATUS_BY_CODE = {
    "DUPLICATE_AADHAAR": status.HTTP_409_CONFLICT,
    "DUPLICATE_VOTER_ID": status.HTTP_409_CONFLICT,
    "DUPLICATE_FACE": status.HTTP_409_CONFLICT,
}


@extend_schema(
    tags=["Voters"],
    request=RegisterVoterInputSerializer,
    responses={
        201: OpenApiResponse(VoterOutSerializer, description="Inscrit"),
        400: OpenApiResponse(description="INVALID_* | *_QUALITY_INSUFFICIENT"),
        409: OpenApiResponse(description="DUPLICATE_AADHAAR | DUPLICATE_VOTER_ID | DUPLICATE_FACE"),
        503: OpenApiResponse(description="ENROLLMENT_BUSY"),
    },
    examples=[OpenApiExample("Requête", value={
        "name": "Asha Rao", "aadhaar_number": "123412341234", "voter_id": "A123456789",
        "address": "12 MG Road", "face_data": "data:image/jpeg;base64,/9j/...", "iris_data": "data:image/jpeg;base64,/9j/...",
    }, request_only=True)]
)
class RegisterVoterView(APIView):
    """
    POST /voters/register
    Auth: HMAC (clé du bureau d'inscription)
    """
    serializer_class = RegisterVoterInputSerializer

    def post(self, request):
        station = getattr(request, "station", None)
        if not station:
            return Response({"error":{"code":"UNAUTHORIZED","message":"Polling station auth required"}}, status=401)

        ser = self.serializer_class(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            res = register_voter(station=station, **ser.validated_data)
        except EnrollmentBusy as e:
            return Response({"error":{"code":str(e),"message":"Another registration is in progress, retry shortly"}},
                            status=status.HTTP_503_SERVICE_UNAVAILABLE)

        if not res.success:
            return Response({"error":{"code":res.code,"message":res.message,"details":res.details}},
                            status=STATUS_BY_CODE.get(res.code, status.HTTP_400_BAD_REQUEST))

        return Response({"voter": VoterOutSerializer(res.voter).data, "message": res.message},
                        status=status.HTTP_201_CREATED)
