from django.shortcuts import get_object_or_404
from django.db import transaction
from rest_framework import viewsets, mixins, status
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAdminUser
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import WebhookConfig, WebhookDelivery
from .serializers.webhooks import WebhookConfigOutSerializer, WebhookConfigUpsertSerializer, \
    WebhookDeliveryOutSerializer
from .tasks import deliver_webhook_task


@extend_schema(tags=["Admin - Webhooks"])
class WebhookConfigAdminViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin,
                                mixins.DestroyModelMixin):
    """
    Super-admin: abonnements webhooks.
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]
    serializer_class = WebhookConfigOutSerializer
    queryset = WebhookConfig.objects.all().order_by("id")

    @transaction.atomic
    def create(self, request):
        ser = WebhookConfigUpsertSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        cfg = ser.save()
        return Response(WebhookConfigOutSerializer(cfg).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def partial_update(self, request, pk=None):
        cfg = get_object_or_404(WebhookConfig, pk=pk)
        ser = WebhookConfigUpsertSerializer(instance=cfg, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        cfg = ser.save()
        return Response(WebhookConfigOutSerializer(cfg).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="test")
    def test_send(self, request, pk=None):
        """
        Déclenche un webhook de test (event="test.ping").
        Body: {"data": {...}} optionnel
        """
        cfg = get_object_or_404(WebhookConfig, pk=pk)
        data = request.data.get("data", {"msg": "hello from VoteGuard"})
        deliver_webhook_task.delay(cfg.id, "test.ping", data, attempt=1)
        return Response({"detail": "queued"}, status=status.HTTP_202_ACCEPTED)


@extend_schema(tags=["Admin - Webhooks"])
class WebhookDeliveryAdminViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    """
    Super-admin: consultation des livraisons (?config_id=&event=&ok=true|false).
    """
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAdminUser]
    serializer_class = WebhookDeliveryOutSerializer

    def get_queryset(self):
        qs = WebhookDelivery.objects.select_related("config").order_by("-created_at", "-id")
        config_id = self.request.query_params.get("config_id")
        event = self.request.query_params.get("event")
        ok = self.request.query_params.get("ok")
        if config_id:
            qs = qs.filter(config_id=config_id)
        if event:
            qs = qs.filter(event=event)
        if ok is not None:
            qs = qs.filter(ok=(ok.lower() == "true"))
        return qs
