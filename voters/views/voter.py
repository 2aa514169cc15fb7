from django.shortcuts import get_object_or_404
from django.db import transaction
from rest_framework import viewsets, status, mixins
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from ..models import Voter
from ..serializers.input import VoterUpdateSerializer
from ..serializers.voter import VoterOutSerializer
from ..services.registration import check_formats, check_uniqueness


class VoterAdminViewSet(viewsets.GenericViewSet,
                        mixins.ListModelMixin,
                        mixins.RetrieveModelMixin):
    """
    Super-admin: gestion de la liste électorale (lecture, correction d'état civil, suppression).
    Les captures biométriques ne sont pas modifiables: réinscrire l'électeur.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]
    serializer_class = VoterOutSerializer
    queryset = Voter.objects.select_related("station").all()
    filterset_fields = ["has_voted", "station"]
    search_fields = ["name", "voter_id"]
    ordering_fields = ["created_at", "name"]

    @transaction.atomic
    def partial_update(self, request, pk=None):
        voter = get_object_or_404(Voter, pk=pk)
        ser = VoterUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        voter_id = data.get("voter_id", voter.voter_id)
        aadhaar = data.get("aadhaar_number", voter.aadhaar_number)
        bad = (check_formats(voter_id=voter_id, aadhaar_number=aadhaar)
               or check_uniqueness(voter_id=voter_id, aadhaar_number=aadhaar, exclude_pk=voter.pk))
        if bad:
            code = status.HTTP_409_CONFLICT if bad.code.startswith("DUPLICATE_") else status.HTTP_400_BAD_REQUEST
            return Response({"error":{"code":bad.code,"message":bad.message}}, status=code)

        for f in ("name", "address", "voter_id", "aadhaar_number"):
            if f in data:
                setattr(voter, f, data[f].strip() if f == "name" else data[f])
        voter.save()
        return Response(VoterOutSerializer(voter).data, status=status.HTTP_200_OK)

    @transaction.atomic
    def destroy(self, request, pk=None):
        voter = get_object_or_404(Voter, pk=pk)
        voter.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
