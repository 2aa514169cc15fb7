import secrets
from django.shortcuts import get_object_or_404
from django.db import transaction
from rest_framework import viewsets, status
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from stations.models import PollingStation
from ..models import ApiKey
from ..serializers.apikey import (
    ApiKeyCreateSerializer, ApiKeyRefSerializer, ApiKeyOutSerializer, ApiKeyRevealSerializer
)

class ApiKeyAdminViewSet(viewsets.ViewSet):
    """
    Super-admin only: création/rotation/suspension des clés des bureaux de vote.
    Le secret n'est révélé qu'une fois (création/rotation).
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]

    def list(self, request):
        qs = ApiKey.objects.select_related("station").order_by("-created_at")
        return Response(ApiKeyOutSerializer(qs, many=True).data)

    @transaction.atomic
    def create(self, request):
        ser = ApiKeyCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        station = get_object_or_404(PollingStation, pk=data["station_id"])

        key_id = secrets.token_hex(16)
        key_secret = secrets.token_urlsafe(32)

        ak = ApiKey(
            station=station,
            key_id=key_id,
            active=True,
            allowed_ips=data.get("allowed_ips"),
            expires_at=data.get("expires_at"),
            name=data.get("name", ""),
        )
        ak.set_secret(key_secret)
        ak.save()

        reveal = ApiKeyRevealSerializer({"key_id": key_id, "key_secret": key_secret})
        return Response(reveal.data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="rotate")
    @transaction.atomic
    def rotate(self, request):
        ser = ApiKeyRefSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        ak = get_object_or_404(ApiKey, key_id=ser.validated_data["key_id"], active=True)
        new_secret = secrets.token_urlsafe(32)
        ak.set_secret(new_secret)
        ak.save(update_fields=["key_secret_enc"])

        reveal = ApiKeyRevealSerializer({"key_id": ak.key_id, "key_secret": new_secret})
        return Response(reveal.data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="suspend")
    def suspend(self, request):
        ser = ApiKeyRefSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        ak = get_object_or_404(ApiKey, key_id=ser.validated_data["key_id"])
        ak.active = False
        ak.save(update_fields=["active"])
        return Response({"detail": "suspended"}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="resume")
    def resume(self, request):
        ser = ApiKeyRefSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        ak = get_object_or_404(ApiKey, key_id=ser.validated_data["key_id"])
        ak.active = True
        ak.save(update_fields=["active"])
        return Response({"detail": "resumed"}, status=status.HTTP_200_OK)
