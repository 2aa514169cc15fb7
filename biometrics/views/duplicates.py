from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse

from ..serializers.input import DuplicateCheckInputSerializer
from ..serializers.output import DuplicateCheckOutputSerializer
from ..services.dedup import EnrolledIdentity, check_duplicate_enrollment


@extend_schema(
    tags=["Biometrics"],
    request=DuplicateCheckInputSerializer,
    responses={200: OpenApiResponse(DuplicateCheckOutputSerializer)},
)
class DuplicateCheckView(APIView):
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = DuplicateCheckInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        roster = [EnrolledIdentity(id=r["id"], name=r["name"], blob=r["blob"]) for r in ser.validated_data["roster"]]
        out = check_duplicate_enrollment(ser.validated_data["new_blob"], roster)
        return Response({
            "is_duplicate": out.is_duplicate,
            "matched_id": out.matched_id,
            "score": out.score,
            "reason_code": out.reason_code,
            "details": out.details,
        }, status=200)
