import uuid

from django.conf import settings
from django.core import signing

BALLOT_SALT = "voteguard.ballot"


class InvalidBallotToken(Exception):
    pass


def max_age() -> int:
    return int(getattr(settings, "VOTING_BALLOT_TOKEN_MAX_AGE", 300))


def issue_ballot_token(voter) -> str:
    # signé + horodaté ; ne porte que l'identifiant interne de l'électeur
    return signing.dumps({"voter": voter.pk, "nonce": uuid.uuid4().hex}, salt=BALLOT_SALT)


def read_ballot_token(token: str) -> int:
    try:
        data = signing.loads(token, salt=BALLOT_SALT, max_age=max_age())
    except signing.SignatureExpired:
        raise InvalidBallotToken("Ballot token expired, please verify again")
    except signing.BadSignature:
        raise InvalidBallotToken("Ballot token invalid")
    if not isinstance(data, dict) or "voter" not in data:
        raise InvalidBallotToken("Ballot token invalid")
    return data["voter"]
