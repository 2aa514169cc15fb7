from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse

from ..serializers.input import VerifyInputSerializer
from ..serializers.output import VerifyOutputSerializer
from ..services.verification import verify_for_voting


@extend_schema(
    tags=["Biometrics"],
    request=VerifyInputSerializer,
    responses={200: OpenApiResponse(VerifyOutputSerializer)},
    examples=[OpenApiExample("Réponse", value={
        "matched": False, "score": 0.42, "distance": 0.58, "threshold": 0.65,
        "reason_code": "BELOW_THRESHOLD", "message": "Face does not match ...",
    }, response_only=True)]
)
class VerifyView(APIView):
    """
    Comparaison brute capture/référence, sans registre ni comptage de tentatives.
    Le parcours de vote complet est /voting/verify.
    """
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = VerifyInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        out = verify_for_voting(ser.validated_data["enrolled_blob"], ser.validated_data["captured_blob"])
        return Response({
            "matched": out.matched,
            "score": out.score.score,
            "distance": out.distance,
            "threshold": out.threshold,
            "reason_code": out.reason_code,
            "message": out.message,
        }, status=200)
