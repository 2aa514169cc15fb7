from django.db import models


class WebhookConfig(models.Model):
    """
    Abonnement webhook de l'autorité électorale (tableau de bord, SIEM, ...).
    - url: endpoint HTTP(s) destinataire
    - secret: secret HMAC ("plain:xxxxx" en DEV, sinon chiffré Fernet comme les clés API)
    - events: événements souscrits (ex: ["vote.cast","registration.duplicate_detected"]) ; vide = tous
    - timeout_s / max_retries / backoff_s: politique d'envoi
    """
    name = models.CharField(max_length=128)
    url = models.URLField()
    secret = models.CharField(max_length=255)
    events = models.JSONField(default=list, blank=True)
    active = models.BooleanField(default=True)
    timeout_s = models.PositiveIntegerField(default=10)
    max_retries = models.PositiveIntegerField(default=5)
    backoff_s = models.PositiveIntegerField(default=5)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "webhook_configs"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"WebhookConfig({self.name}, active={self.active})"

    def wants(self, event: str) -> bool:
        return self.active and (not self.events or event in self.events)


class WebhookDelivery(models.Model):
    """
    Journal des livraisons, une ligne par tentative.
    status_code nul si l'envoi a levé (timeout, DNS, ...).
    """
    config = models.ForeignKey(WebhookConfig, on_delete=models.SET_NULL, null=True, blank=True, related_name="deliveries")
    event = models.CharField(max_length=64)
    url = models.URLField()
    attempt = models.PositiveIntegerField(default=1)
    headers = models.JSONField(default=dict, blank=True)
    payload = models.JSONField(default=dict, blank=True)

    status_code = models.IntegerField(null=True, blank=True)
    ok = models.BooleanField(default=False)
    error = models.TextField(blank=True, default="")
    duration_ms = models.IntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "webhook_deliveries"
        indexes = [
            models.Index(fields=["event", "created_at"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self) -> str:
        return f"WebhookDelivery(ev={self.event}, ok={self.ok}, attempt={self.attempt})"
