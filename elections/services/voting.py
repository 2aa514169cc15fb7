"""
Parcours de vote: identification par les pièces, vérification faciale
comptée, dépôt du bulletin.

Le bulletin est secret: aucune table ne relie un électeur au candidat choisi.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from biometrics.services.verification import verify_for_voting
from voters.models import Voter
from webhooks.services.events import emit_event

from ..models import Candidate, VerificationAttempt, ManualVerificationRequest
from .ballot import issue_ballot_token, read_ballot_token, InvalidBallotToken

logger = logging.getLogger("voteguard.elections")


@dataclass
class VotingResult:
    success: bool
    code: str
    message: str
    data: Dict = field(default_factory=dict)


def max_face_attempts() -> int:
    return int(getattr(settings, "VOTING_MAX_FACE_ATTEMPTS", 3))


def find_voter(*, aadhaar_number: str, voter_id: str, name: str, for_update: bool = False) -> Optional[Voter]:
    qs = Voter.objects.select_for_update() if for_update else Voter.objects.all()
    voter = qs.filter(aadhaar_number=aadhaar_number, voter_id=voter_id).first()
    if voter is None or voter.name.strip().lower() != (name or "").strip().lower():
        return None
    return voter


def failed_attempts(voter: Voter) -> int:
    return VerificationAttempt.objects.filter(voter=voter, matched=False).count()


def _not_found() -> VotingResult:
    return VotingResult(False, "VOTER_NOT_FOUND",
                        "Voter not found. Please check your credentials or register first.")


def _already_voted(voter: Voter) -> VotingResult:
    return VotingResult(False, "ALREADY_VOTED", "You have already cast your vote.",
                        data={"voted_at": voter.voted_at.isoformat() if voter.voted_at else None})


@transaction.atomic
def verify_voter(*, aadhaar_number: str, voter_id: str, name: str, face_data: str, station=None) -> VotingResult:
    """
    Une tentative = une comparaison, toujours journalisée.
    Verrou sur la ligne électeur: deux kiosques ne peuvent pas consommer
    la même tentative en parallèle.
    """
    voter = find_voter(aadhaar_number=aadhaar_number, voter_id=voter_id, name=name, for_update=True)
    if voter is None:
        return _not_found()
    if voter.has_voted:
        return _already_voted(voter)

    budget = max_face_attempts()
    failures = failed_attempts(voter)
    if failures >= budget:
        return VotingResult(False, "MANUAL_VERIFICATION_REQUIRED",
                            "Face verification failed too many times. Please contact the Election Officer "
                            "for manual identity confirmation.",
                            data={"attempts_remaining": 0})

    outcome = verify_for_voting(voter.face_data, face_data)
    VerificationAttempt.objects.create(voter=voter, station=station, matched=outcome.matched,
                                       score=outcome.score.score, reason_code=outcome.reason_code)
    metrics = {"score": outcome.score.score, "distance": outcome.distance,
               "threshold": outcome.threshold, "reason_code": outcome.reason_code}

    if outcome.matched:
        logger.info("AUDIT verification ok: %s (%s) score=%.4f", voter.voter_id, voter.masked_aadhaar,
                    outcome.score.score)
        return VotingResult(True, "VERIFIED", outcome.message, data={
            **metrics, "ballot_token": issue_ballot_token(voter), "voter_name": voter.name,
        })

    remaining = max(0, budget - (failures + 1))
    logger.warning("AUDIT verification failed: %s (%s) code=%s score=%.4f remaining=%d",
                   voter.voter_id, voter.masked_aadhaar, outcome.reason_code, outcome.score.score, remaining)
    if remaining == 0:
        emit_event("verification.locked", {
            "voter_id": voter.voter_id,
            "station": station.code if station else None,
            "attempts": budget,
        })
    return VotingResult(False, "FACE_VERIFICATION_FAILED", outcome.message,
                        data={**metrics, "attempts_remaining": remaining})


def cast_vote(*, ballot_token: str, candidate_id: int, station=None) -> VotingResult:
    try:
        voter_pk = read_ballot_token(ballot_token)
    except InvalidBallotToken as e:
        return VotingResult(False, "INVALID_BALLOT_TOKEN", str(e))

    with transaction.atomic():
        voter = Voter.objects.select_for_update().filter(pk=voter_pk).first()
        if voter is None:
            return _not_found()
        if voter.has_voted:
            return _already_voted(voter)
        if not Candidate.objects.filter(pk=candidate_id).exists():
            return VotingResult(False, "CANDIDATE_NOT_FOUND", "Selected candidate does not exist.")

        voter.mark_voted(station)
        Candidate.objects.filter(pk=candidate_id).update(vote_count=F("vote_count") + 1)
        # pas d'identifiant électeur ni candidat dans l'événement
        emit_event("vote.cast", {
            "station": station.code if station else None,
            "cast_at": voter.voted_at.isoformat(),
        })

    logger.info("AUDIT vote cast by %s (%s)", voter.voter_id, voter.masked_aadhaar)
    return VotingResult(True, "VOTE_CAST", "Your vote has been recorded successfully. Thank you for voting!",
                        data={"voted_at": voter.voted_at.isoformat()})


def election_results() -> Dict:
    candidates = list(Candidate.objects.order_by("id"))
    total = sum(c.vote_count for c in candidates)
    registered = Voter.objects.count()

    rows = [{
        "id": c.id, "name": c.name, "party": c.party, "symbol": c.symbol,
        "vote_count": c.vote_count,
        "percentage": round(c.vote_count * 100.0 / total, 2) if total else 0.0,
    } for c in candidates]

    winner = None
    if total:
        # max() garde le premier maximum: égalité => plus petit id
        winner = max(rows, key=lambda r: r["vote_count"])

    return {
        "candidates": rows,
        "total_votes": total,
        "registered_voters": registered,
        "turnout": round(total * 100.0 / registered, 2) if registered else 0.0,
        "winner": winner,
    }


# ---------------------------------------------------------------------------
# Vérification manuelle
# ---------------------------------------------------------------------------

def request_manual_verification(*, aadhaar_number: str, voter_id: str, name: str, remarks: str = "",
                                station=None) -> VotingResult:
    voter = find_voter(aadhaar_number=aadhaar_number, voter_id=voter_id, name=name)
    if voter is None:
        return _not_found()
    if voter.has_voted:
        return _already_voted(voter)

    pending = ManualVerificationRequest.objects.filter(
        voter=voter, status=ManualVerificationRequest.STATUS_PENDING).first()
    if pending:
        return VotingResult(True, "MANUAL_VERIFICATION_PENDING",
                            "A request is already pending. Please wait for the Election Officer.",
                            data={"request_id": pending.id})

    with transaction.atomic():
        req = ManualVerificationRequest.objects.create(voter=voter, station=station, remarks=remarks or "")
        emit_event("manual_verification.requested", {
            "request_id": req.id,
            "voter_id": voter.voter_id,
            "station": station.code if station else None,
            "failed_attempts": failed_attempts(voter),
        })
    logger.info("AUDIT manual verification requested: %s (%s) request=%d",
                voter.voter_id, voter.masked_aadhaar, req.id)
    return VotingResult(True, "MANUAL_VERIFICATION_REQUESTED",
                        "Your request has been sent to the Election Officer. Please wait for assistance.",
                        data={"request_id": req.id})


@transaction.atomic
def resolve_manual_verification(req: ManualVerificationRequest, *, approve: bool, user=None,
                                note: str = "") -> VotingResult:
    req = ManualVerificationRequest.objects.select_for_update().select_related("voter").get(pk=req.pk)
    if not req.is_pending:
        return VotingResult(False, "REQUEST_NOT_PENDING", f"Request already {req.status}.")
    if approve and req.voter.has_voted:
        return _already_voted(req.voter)

    req.status = ManualVerificationRequest.STATUS_APPROVED if approve else ManualVerificationRequest.STATUS_REJECTED
    req.review_note = note or ""
    req.resolved_by = getattr(user, "username", "") or ""
    req.resolved_at = timezone.now()
    req.save(update_fields=["status", "review_note", "resolved_by", "resolved_at"])

    emit_event("manual_verification.resolved", {"request_id": req.id, "status": req.status})
    logger.info("AUDIT manual verification %s: %s request=%d", req.status, req.voter.voter_id, req.id)

    data = {"request_id": req.id, "status": req.status}
    if approve:
        data["ballot_token"] = issue_ballot_token(req.voter)
    return VotingResult(True, req.status.upper(), f"Request {req.status}.", data=data)
