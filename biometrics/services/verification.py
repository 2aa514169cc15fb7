import logging
from dataclasses import dataclass
from typing import Optional

from .config import MatchingConfig, MODE_VERIFICATION, get_config
from .scorer import SimilarityScore, score_similarity, INVALID_INPUT
from .validator import validate_image_blob

logger = logging.getLogger("voteguard.biometrics")

MATCHED = "MATCHED"
BELOW_THRESHOLD = "BELOW_THRESHOLD"
ENROLLED_BLOB_INVALID = "ENROLLED_BLOB_INVALID"


@dataclass
class VerificationOutcome:
    matched: bool
    score: SimilarityScore
    reason_code: str
    message: str
    threshold: float

    @property
    def distance(self) -> float:
        return round(1.0 - self.score.score, 6)


def verify_for_voting(enrolled_blob, captured_blob, config: Optional[MatchingConfig] = None) -> VerificationOutcome:
    """
    Une comparaison = une réponse. Pas de retry ici: le comptage des tentatives
    appartient à l'appelant (voir elections.services.voting).
    """
    cfg = config or get_config()
    threshold = cfg.verification_threshold

    captured = validate_image_blob(captured_blob, MODE_VERIFICATION, cfg)
    if not captured.valid:
        return VerificationOutcome(
            matched=False,
            score=SimilarityScore(score=0.0, reason=INVALID_INPUT),
            reason_code=captured.code,
            message=f"Face capture rejected: {captured.reason}. Please retake the photo.",
            threshold=threshold,
        )

    enrolled = validate_image_blob(enrolled_blob, MODE_VERIFICATION, cfg)
    if not enrolled.valid:
        logger.warning("verify: enrolled blob unusable (%s)", enrolled.code)
        return VerificationOutcome(
            matched=False,
            score=SimilarityScore(score=0.0, reason=INVALID_INPUT),
            reason_code=ENROLLED_BLOB_INVALID,
            message="Registered face data is unusable. Please contact the Election Officer.",
            threshold=threshold,
        )

    sim = score_similarity(enrolled_blob, captured_blob, cfg)
    if sim.score >= threshold:
        return VerificationOutcome(
            matched=True,
            score=sim,
            reason_code=MATCHED,
            message=f"Identity confirmed (similarity: {sim.score * 100:.1f}%, distance: {1 - sim.score:.3f}).",
            threshold=threshold,
        )

    return VerificationOutcome(
        matched=False,
        score=sim,
        reason_code=BELOW_THRESHOLD,
        message=(
            f"Face does not match the registered face data (similarity: {sim.score * 100:.1f}%, "
            f"distance: {1 - sim.score:.3f}, required: {threshold * 100:.0f}%)."
        ),
        threshold=threshold,
    )
