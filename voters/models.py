from django.db import models
from django.utils import timezone


class Voter(models.Model):
    """
    Inscrit sur la liste électorale.
    - face_data / iris_data: data URLs base64 capturées à l'inscription, immuables
      (iris capturé mais jamais comparé au moment du vote)
    - has_voted / voted_at / voted_station: marqués au dépôt du bulletin,
      sans lien vers le candidat choisi (secret du vote)
    L'ordre d'inscription (created_at, id) est l'ordre de parcours du contrôle doublon.
    """
    name = models.CharField(max_length=150)
    aadhaar_number = models.CharField(max_length=12, unique=True)
    voter_id = models.CharField(max_length=10, unique=True, db_index=True)
    address = models.TextField(blank=True, default="")

    face_data = models.TextField()
    iris_data = models.TextField()

    station = models.ForeignKey("stations.PollingStation", on_delete=models.SET_NULL,
                                null=True, blank=True, related_name="registered_voters")
    has_voted = models.BooleanField(default=False, db_index=True)
    voted_at = models.DateTimeField(null=True, blank=True)
    voted_station = models.ForeignKey("stations.PollingStation", on_delete=models.SET_NULL,
                                      null=True, blank=True, related_name="+")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "voters"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.voter_id})"

    @property
    def masked_aadhaar(self) -> str:
        return mask_aadhaar(self.aadhaar_number)

    def mark_voted(self, station=None):
        self.has_voted = True
        self.voted_at = timezone.now()
        self.voted_station = station
        self.save(update_fields=["has_voted", "voted_at", "voted_station", "updated_at"])


def mask_aadhaar(aadhaar: str) -> str:
    return (aadhaar or "")[:4] + "********"
