from django.conf import settings
from django.db import models
from django.utils import timezone
from cryptography.fernet import Fernet, InvalidToken


class SecretUnavailable(Exception):
    pass


def _fernet():
    aes_key = getattr(settings, "APIKEYS_ENC_KEY", None)
    return Fernet(aes_key.encode("utf-8")) if aes_key else None


class ApiKey(models.Model):
    """
    Clé API portée par un bureau de vote.
    Le secret HMAC doit être relu pour vérifier une signature: il est donc
    CHIFFRÉ (Fernet, clé APIKEYS_ENC_KEY), jamais hashé.
    - key_id (public) communiqué au kiosque
    - key_secret_enc: secret chiffré, ou "plain:<secret>" en DEV sans APIKEYS_ENC_KEY
    - allowed_ips: liste optionnelle d'IPs autorisées
    - expires_at: optionnel ; si dépassé => inactif
    """
    station = models.ForeignKey("stations.PollingStation", on_delete=models.CASCADE, related_name="api_keys")
    key_id = models.CharField(max_length=64, unique=True, db_index=True)
    key_secret_enc = models.CharField(max_length=255)
    active = models.BooleanField(default=True)
    allowed_ips = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    name = models.CharField(max_length=128, blank=True, default="")

    class Meta:
        db_table = "api_keys"
        indexes = [models.Index(fields=["station", "active"])]

    def __str__(self) -> str:
        return f"{self.station_id}:{self.key_id}"

    @property
    def is_expired(self) -> bool:
        return bool(self.expires_at and self.expires_at <= timezone.now())

    def set_secret(self, raw_secret: str) -> None:
        f = _fernet()
        if f is None:
            # Mode dégradé DEV uniquement
            self.key_secret_enc = f"plain:{raw_secret}"
        else:
            self.key_secret_enc = f.encrypt(raw_secret.encode("utf-8")).decode("utf-8")

    def reveal_secret(self) -> bytes:
        if self.key_secret_enc.startswith("plain:"):
            return self.key_secret_enc.split("plain:", 1)[1].encode("utf-8")
        f = _fernet()
        if f is None:
            raise SecretUnavailable("Server misconfigured: missing APIKEYS_ENC_KEY")
        try:
            return f.decrypt(self.key_secret_enc.encode("utf-8"))
        except InvalidToken:
            raise SecretUnavailable("Cannot decrypt API key secret")

    def touch_last_used(self):
        self.last_used_at = timezone.now()
        self.save(update_fields=["last_used_at"])
