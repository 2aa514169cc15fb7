from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse

from ..serializers.voting import VerifyVoterInputSerializer, CastVoteInputSerializer, \
    ManualVerificationInputSerializer, ResultsOutputSerializer
from ..services.voting import verify_voter, cast_vote, request_manual_verification, election_results

STATUS_BY_CODE = {
    "VOTER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CANDIDATE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ALREADY_VOTED": status.HTTP_409_CONFLICT,
    "MANUAL_VERIFICATION_REQUIRED": status.HTTP_423_LOCKED,
    "FACE_VERIFICATION_FAILED": status.HTTP_403_FORBIDDEN,
    "INVALID_BALLOT_TOKEN": status.HTTP_403_FORBIDDEN,
    "REQUEST_NOT_PENDING": status.HTTP_409_CONFLICT,
}


def error_response(res):
    return Response({"error": {"code": res.code, "message": res.message, **res.data}},
                    status=STATUS_BY_CODE.get(res.code, status.HTTP_400_BAD_REQUEST))


@extend_schema(
    tags=["Voting"],
    request=VerifyVoterInputSerializer,
    responses={
        200: OpenApiResponse(description="VERIFIED + ballot_token"),
        403: OpenApiResponse(description="FACE_VERIFICATION_FAILED (attempts_remaining)"),
        404: OpenApiResponse(description="VOTER_NOT_FOUND"),
        409: OpenApiResponse(description="ALREADY_VOTED"),
        423: OpenApiResponse(description="MANUAL_VERIFICATION_REQUIRED"),
    },
    examples=[OpenApiExample("Réponse", value={
        "code": "VERIFIED", "message": "Identity confirmed (similarity: 97.1%, distance: 0.029).",
        "score": 0.971, "distance": 0.029, "threshold": 0.65, "reason_code": "MATCHED",
        "ballot_token": "eyJ2b3RlciI6MX0:1u...", "voter_name": "Asha Rao",
    }, response_only=True)]
)
class VerifyVoterView(APIView):
    """
    POST /voting/verify
    Auth: HMAC (kiosque du bureau de vote)
    """
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = VerifyVoterInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        res = verify_voter(station=station, **ser.validated_data)
        if not res.success:
            return error_response(res)
        return Response({"code": res.code, "message": res.message, **res.data}, status=200)


@extend_schema(tags=["Voting"], request=CastVoteInputSerializer,
               responses={200: OpenApiResponse(description="VOTE_CAST"),
                          403: OpenApiResponse(description="INVALID_BALLOT_TOKEN"),
                          404: OpenApiResponse(description="CANDIDATE_NOT_FOUND"),
                          409: OpenApiResponse(description="ALREADY_VOTED")})
class CastVoteView(APIView):
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = CastVoteInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        res = cast_vote(station=station, **ser.validated_data)
        if not res.success:
            return error_response(res)
        return Response({"code": res.code, "message": res.message, **res.data}, status=200)


@extend_schema(tags=["Voting"], request=ManualVerificationInputSerializer,
               responses={201: OpenApiResponse(description="MANUAL_VERIFICATION_REQUESTED"),
                          200: OpenApiResponse(description="MANUAL_VERIFICATION_PENDING"),
                          404: OpenApiResponse(description="VOTER_NOT_FOUND")})
class ManualVerificationRequestView(APIView):
    def post(self, request):
        station = getattr(request, "station", None)
        if not station: return Response({"error":{"code":"UNAUTHORIZED"}}, status=401)

        ser = ManualVerificationInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        res = request_manual_verification(station=station, **ser.validated_data)
        if not res.success:
            return error_response(res)
        code = status.HTTP_201_CREATED if res.code == "MANUAL_VERIFICATION_REQUESTED" else status.HTTP_200_OK
        return Response({"code": res.code, "message": res.message, **res.data}, status=code)


@extend_schema(tags=["Voting"], responses={200: ResultsOutputSerializer})
class ResultsView(APIView):
    """Résultats publics agrégés (aucune donnée personnelle)."""
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(ResultsOutputSerializer(election_results()).data, status=200)
