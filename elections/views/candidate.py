from django.shortcuts import get_object_or_404
from django.db import transaction
from rest_framework import viewsets, status, mixins
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from ..models import Candidate
from ..serializers.candidate import CandidateOutSerializer, CandidateUpsertSerializer


@extend_schema(tags=["Admin - Candidates"])
class CandidateAdminViewSet(viewsets.GenericViewSet,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin):
    """
    Super-admin: candidats. vote_count en lecture seule.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]
    serializer_class = CandidateOutSerializer
    queryset = Candidate.objects.all().order_by("id")

    @transaction.atomic
    def create(self, request):
        ser = CandidateUpsertSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        candidate = ser.save()
        return Response(CandidateOutSerializer(candidate).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def partial_update(self, request, pk=None):
        candidate = get_object_or_404(Candidate, pk=pk)
        ser = CandidateUpsertSerializer(instance=candidate, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(CandidateOutSerializer(candidate).data, status=status.HTTP_200_OK)
