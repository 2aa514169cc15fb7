from django.db import models


class Candidate(models.Model):
    """
    Candidat au scrutin unique. vote_count n'est modifié que par le dépôt
    d'un bulletin (incrément F()), jamais par l'API d'administration.
    """
    name = models.CharField(max_length=150)
    party = models.CharField(max_length=150)
    symbol = models.CharField(max_length=32, blank=True, default="")
    vote_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "candidates"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.party})"


class VerificationAttempt(models.Model):
    voter = models.ForeignKey("voters.Voter", on_delete=models.CASCADE, related_name="verification_attempts")
    station = models.ForeignKey("stations.PollingStation", on_delete=models.SET_NULL, null=True, blank=True,
                                related_name="+")
    matched = models.BooleanField(default=False)
    score = models.FloatField(default=0.0)
    reason_code = models.CharField(max_length=32)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "verification_attempts"
        indexes = [models.Index(fields=["voter", "matched"])]

    def __str__(self) -> str:
        return f"Attempt(v={self.voter_id}, matched={self.matched}, score={self.score:.3f})"


class ManualVerificationRequest(models.Model):
    """
    Demande de vérification manuelle par l'Election Officer, typiquement
    après épuisement des tentatives faciales.
    """
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    voter = models.ForeignKey("voters.Voter", on_delete=models.CASCADE, related_name="manual_requests")
    station = models.ForeignKey("stations.PollingStation", on_delete=models.SET_NULL, null=True, blank=True,
                                related_name="+")
    remarks = models.TextField(blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    review_note = models.TextField(blank=True, default="")
    resolved_by = models.CharField(max_length=150, blank=True, default="")  # username staff
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "manual_verification_requests"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"ManualVerification(v={self.voter_id}, {self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.STATUS_PENDING
