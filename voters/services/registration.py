import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction

from biometrics.services.blob import EncodedImageBlob
from biometrics.services.config import MODE_REGISTRATION
from biometrics.services.dedup import EnrolledIdentity, check_duplicate_enrollment
from biometrics.services.validator import validate_image_blob
from webhooks.services.events import emit_event

from ..models import Voter, mask_aadhaar
from .locking import enrollment_lock

logger = logging.getLogger("voteguard.voters")

AADHAAR_RE = re.compile(r"^\d{12}$")


@dataclass
class RegistrationResult:
    success: bool
    code: str
    message: str
    voter: Optional[Voter] = None
    details: Dict = field(default_factory=dict)


def valid_voter_id(voter_id: str) -> bool:
    # 10 caractères, commence par une lettre, finit par un chiffre (ex: A123456789)
    return (
        isinstance(voter_id, str) and len(voter_id) == 10
        and voter_id[0].isascii() and voter_id[0].isalpha()
        and voter_id[-1].isascii() and voter_id[-1].isdigit()
    )


def valid_aadhaar(aadhaar: str) -> bool:
    return bool(isinstance(aadhaar, str) and AADHAAR_RE.match(aadhaar))


def iris_min_length() -> int:
    return int(getattr(settings, "VOTER_IRIS_MIN_LENGTH", 10000))


def check_formats(*, voter_id: str, aadhaar_number: str) -> Optional[RegistrationResult]:
    if not valid_voter_id(voter_id):
        return RegistrationResult(False, "INVALID_VOTER_ID",
                                  "Invalid Voter ID format. Voter ID must be exactly 10 characters long, "
                                  "start with a letter, and end with a number (e.g., A123456789).")
    if not valid_aadhaar(aadhaar_number):
        return RegistrationResult(False, "INVALID_AADHAAR", "Invalid Aadhaar number. Aadhaar must be exactly 12 digits.")
    return None


def check_uniqueness(*, voter_id: str, aadhaar_number: str, exclude_pk=None) -> Optional[RegistrationResult]:
    others = Voter.objects.all()
    if exclude_pk is not None:
        others = others.exclude(pk=exclude_pk)

    dup = others.filter(aadhaar_number=aadhaar_number).first()
    if dup:
        return RegistrationResult(False, "DUPLICATE_AADHAAR",
                                  f"This Aadhaar number is already registered under the name: {dup.name}. "
                                  "Each Aadhaar number can only be used once.")
    dup = others.filter(voter_id=voter_id).first()
    if dup:
        return RegistrationResult(False, "DUPLICATE_VOTER_ID",
                                  f"This Voter ID is already registered under the name: {dup.name}. "
                                  "Each Voter ID can only be used once.")
    return None


def register_voter(*, name: str, aadhaar_number: str, voter_id: str, address: str,
                   face_data: str, iris_data: str, station=None) -> RegistrationResult:
    """
    Inscription: formats, qualité des captures, puis sous verrou global:
    unicité des identifiants + contrôle doublon biométrique + insertion.
    """
    bad = check_formats(voter_id=voter_id, aadhaar_number=aadhaar_number)
    if bad:
        return bad

    face = validate_image_blob(face_data, MODE_REGISTRATION)
    if not face.valid:
        logger.info("register: face rejected (%s) for %s", face.code, mask_aadhaar(aadhaar_number))
        return RegistrationResult(False, "FACE_QUALITY_INSUFFICIENT",
                                  f"Face image quality is insufficient: {face.reason}. Please retake the photo "
                                  "with better lighting and ensure your face is clearly visible.",
                                  details={"validation_code": face.code})

    iris = EncodedImageBlob.parse(iris_data)
    if iris is None or iris.byte_length < iris_min_length():
        return RegistrationResult(False, "IRIS_QUALITY_INSUFFICIENT",
                                  "Iris scan quality is insufficient. Please retake the iris scan "
                                  "with better positioning and lighting.")

    with enrollment_lock():
        bad = check_uniqueness(voter_id=voter_id, aadhaar_number=aadhaar_number)
        if bad:
            logger.info("register: %s for %s", bad.code, mask_aadhaar(aadhaar_number))
            return bad

        roster = [
            EnrolledIdentity(id=v.voter_id, name=v.name, blob=v.face_data)
            for v in Voter.objects.only("voter_id", "name", "face_data").order_by("created_at", "id")
        ]
        dup = check_duplicate_enrollment(face_data, roster)
        if dup.is_duplicate:
            logger.warning("AUDIT registration denied: duplicate face for %s matches %s (score=%.4f)",
                           mask_aadhaar(aadhaar_number), dup.matched_id, dup.score)
            emit_event("registration.duplicate_detected", {
                "station": station.code if station else None,
                "matched_voter_id": dup.matched_id,
                "score": round(dup.score, 4),
                "reason_code": dup.reason_code,
            })
            return RegistrationResult(False, "DUPLICATE_FACE",
                                      f'Registration denied: this face is already registered under "{dup.matched_name}" '
                                      f"(Voter ID: {dup.matched_id}). {dup.details} Each person can register only once. "
                                      "Contact the election office if you believe this is an error.",
                                      details={"matched_voter_id": dup.matched_id, "score": dup.score,
                                               "reason_code": dup.reason_code})

        with transaction.atomic():
            voter = Voter.objects.create(
                name=(name or "").strip(), aadhaar_number=aadhaar_number, voter_id=voter_id,
                address=address or "", face_data=face_data, iris_data=iris_data, station=station,
            )

    logger.info("AUDIT voter registered: %s (%s) roster_size=%d", voter.voter_id, voter.masked_aadhaar, len(roster) + 1)
    return RegistrationResult(True, "REGISTERED",
                              "Voter registered successfully! Your face and iris data have been captured "
                              "securely for voting verification.", voter=voter,
                              details={"closest_score": dup.best_score})
