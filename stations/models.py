from django.db import models
from django.utils import timezone


class PollingStation(models.Model):
    """
    Bureau de vote / kiosque d'inscription: client authentifié de l'API.
    - code: identifiant stable (slug) affiché dans les journaux
    - region: circonscription libre (ex: "Hyderabad-North")
    - status: ACTIVE|SUSPENDED ; une station suspendue ne s'authentifie plus
    - contact_email: responsable (Election Officer) du bureau
    """
    STATUS_ACTIVE = "active"
    STATUS_SUSPENDED = "suspended"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_SUSPENDED, "Suspended"),
    ]

    name = models.CharField(max_length=150, unique=True)
    code = models.SlugField(max_length=64, unique=True, db_index=True)
    region = models.CharField(max_length=64, blank=True, default="")
    contact_email = models.EmailField(blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_seen_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "polling_stations"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} [{self.code}]"

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def touch_seen(self):
        self.last_seen_at = timezone.now()
        self.save(update_fields=["last_seen_at"])
