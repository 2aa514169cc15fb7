from django.shortcuts import get_object_or_404
from django.db import transaction
from rest_framework import viewsets, status, mixins
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAdminUser
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import PollingStation
from ..serializers.station import StationOutSerializer, StationCreateSerializer, StationUpdateSerializer


class StationAdminViewSet(viewsets.GenericViewSet,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin):
    """
    Super-admin: gestion des bureaux de vote + suspend/resume.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]
    serializer_class = StationOutSerializer
    queryset = PollingStation.objects.all().order_by("-created_at")

    @transaction.atomic
    def create(self, request):
        ser = StationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        station = ser.save()
        return Response(StationOutSerializer(station).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def partial_update(self, request, pk=None):
        station = get_object_or_404(PollingStation, pk=pk)
        ser = StationUpdateSerializer(instance=station, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(StationOutSerializer(station).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def suspend(self, request, pk=None):
        station = get_object_or_404(PollingStation, pk=pk)
        station.status = PollingStation.STATUS_SUSPENDED
        station.save(update_fields=["status"])
        return Response({"detail": "station suspended"}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def resume(self, request, pk=None):
        station = get_object_or_404(PollingStation, pk=pk)
        station.status = PollingStation.STATUS_ACTIVE
        station.save(update_fields=["status"])
        return Response({"detail": "station resumed"}, status=status.HTTP_200_OK)
