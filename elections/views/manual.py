from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status, mixins
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAdminUser
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from ..models import ManualVerificationRequest
from ..serializers.voting import ManualVerificationOutSerializer, ReviewInputSerializer
from ..services.voting import resolve_manual_verification
from .voting import error_response


@extend_schema(tags=["Admin - Manual verification"])
class ManualVerificationAdminViewSet(viewsets.GenericViewSet,
                                     mixins.ListModelMixin,
                                     mixins.RetrieveModelMixin):
    """
    Election Officer: revue des demandes (?status=pending) + approve/reject.
    approve renvoie un jeton de bulletin à remettre à l'électeur.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]
    serializer_class = ManualVerificationOutSerializer
    queryset = ManualVerificationRequest.objects.select_related("voter", "station").all()
    filterset_fields = ["status"]

    def _resolve(self, request, pk, approve):
        req = get_object_or_404(ManualVerificationRequest, pk=pk)
        ser = ReviewInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        res = resolve_manual_verification(req, approve=approve, user=request.user, note=ser.validated_data["note"])
        if not res.success:
            return error_response(res)
        return Response({"code": res.code, "message": res.message, **res.data}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._resolve(request, pk, approve=True)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._resolve(request, pk, approve=False)
