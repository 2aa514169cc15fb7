from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse

from ..serializers.input import ScoreInputSerializer
from ..serializers.output import ScoreOutputSerializer
from ..services.scorer import score_similarity


@extend_schema(
    tags=["Biometrics"],
    request=ScoreInputSerializer,
    responses={200: OpenApiResponse(ScoreOutputSerializer)},
    examples=[OpenApiExample("Réponse", value={
        "score": 0.41, "reason": "COMPOSITE",
        "breakdown": {"length": {"value": 1.0, "weight": 0.1}, "window": {"value": 0.03, "weight": 0.6}},
    }, response_only=True)]
)
class ScoreView(APIView):
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = ScoreInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        sim = score_similarity(ser.validated_data["blob_a"], ser.validated_data["blob_b"])

        body = {"score": sim.score, "reason": sim.reason}
        if ser.validated_data["breakdown"]:
            body["breakdown"] = sim.breakdown_dict()
        return Response(body, status=200)
