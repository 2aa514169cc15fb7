import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .config import MatchingConfig, MODE_REGISTRATION, get_config
from .scorer import score_similarity
from .validator import validate_image_blob

logger = logging.getLogger("voteguard.biometrics")

EXACT_DUPLICATE = "EXACT_DUPLICATE"
DUPLICATE = "DUPLICATE"
NO_DUPLICATE = "NO_DUPLICATE"


@dataclass(frozen=True)
class EnrolledIdentity:
    """Vue lecture seule d'un inscrit: jamais modifiée par le moteur."""
    id: Any
    name: str
    blob: str


@dataclass
class DuplicateCheckOutcome:
    is_duplicate: bool
    score: float
    details: str
    reason_code: str
    matched_id: Optional[Any] = None
    matched_name: Optional[str] = None
    best_score: float = 0.0
    best_id: Optional[Any] = None
    compared: int = 0


def check_duplicate_enrollment(new_blob, roster: Iterable[EnrolledIdentity],
                               config: Optional[MatchingConfig] = None) -> DuplicateCheckOutcome:
    """
    Parcourt le registre dans l'ordre d'inscription.
    Le PREMIER inscrit au-dessus du seuil doublon est retenu (pas le meilleur score global).
    Une capture de mauvaise qualité n'est pas une preuve d'unicité: code distinct.
    """
    cfg = config or get_config()
    threshold = cfg.duplicate_threshold

    v = validate_image_blob(new_blob, MODE_REGISTRATION, cfg)
    if not v.valid:
        return DuplicateCheckOutcome(
            is_duplicate=False, score=0.0, reason_code=v.code,
            details=f"Face image quality insufficient, duplicate check not performed: {v.reason}",
        )

    roster = list(roster)
    for identity in roster:
        if identity.blob == new_blob:
            logger.warning("dedup: exact duplicate of enrolled id=%s", identity.id)
            return DuplicateCheckOutcome(
                is_duplicate=True, score=1.0, reason_code=EXACT_DUPLICATE,
                matched_id=identity.id, matched_name=identity.name,
                best_score=1.0, best_id=identity.id,
                details=(f'Face image identical to registered voter "{identity.name}" '
                         f"(ID: {identity.id})."),
            )

    best_score, best_id, compared = 0.0, None, 0
    for identity in roster:
        s = score_similarity(new_blob, identity.blob, cfg).score
        compared += 1
        if s > best_score:
            best_score, best_id = s, identity.id
        if s >= threshold:
            logger.warning("dedup: similarity %.4f >= %.2f with enrolled id=%s", s, threshold, identity.id)
            return DuplicateCheckOutcome(
                is_duplicate=True, score=s, reason_code=DUPLICATE,
                matched_id=identity.id, matched_name=identity.name,
                best_score=best_score, best_id=best_id, compared=compared,
                details=(f'Face pattern {s * 100:.1f}% similar to registered voter "{identity.name}" '
                         f"(ID: {identity.id}). Duplicate threshold: {threshold * 100:.0f}%."),
            )

    logger.info("dedup: no duplicate among %d enrolled (best=%.4f)", compared, best_score)
    return DuplicateCheckOutcome(
        is_duplicate=False, score=best_score, reason_code=NO_DUPLICATE,
        best_score=best_score, best_id=best_id, compared=compared,
        details="No similar face patterns detected in the roster",
    )
