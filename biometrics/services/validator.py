from dataclasses import dataclass
from typing import Optional

from .blob import EncodedImageBlob, FORMAT_SIGNATURES, complexity_ratio, shannon_entropy, \
    DATA_URL_PREFIX, BASE64_MARKER
from .config import MatchingConfig, MODES, get_config

OK = "OK"
MALFORMED_BLOB = "MALFORMED_BLOB"
INSUFFICIENT_QUALITY = "INSUFFICIENT_QUALITY"


@dataclass
class BlobValidation:
    valid: bool
    score: float
    reason: str
    code: str
    blob: Optional[EncodedImageBlob] = None
    header_prefix: str = ""


def _fail(code: str, reason: str, score: float = 0.0, header: str = "") -> BlobValidation:
    return BlobValidation(valid=False, score=score, reason=reason, code=code, header_prefix=header)


def validate_image_blob(blob, mode: str, config: Optional[MatchingConfig] = None) -> BlobValidation:
    """
    Vérifie qu'une capture ressemble à une image encodée exploitable.
    Aucune analyse du contenu de l'image: uniquement des statistiques sur le texte base64.
    Ne lève jamais pour une donnée invalide (seul un mode inconnu est une erreur d'appel).
    """
    if mode not in MODES:
        raise ValueError(f"UNKNOWN_VALIDATION_MODE:{mode}")
    cfg = config or get_config()

    if not blob or not isinstance(blob, str):
        return _fail(MALFORMED_BLOB, "No image data provided")
    if not blob.startswith(DATA_URL_PREFIX):
        return _fail(MALFORMED_BLOB, "Invalid image format - not a data URL")
    if BASE64_MARKER not in blob:
        return _fail(MALFORMED_BLOB, "Invalid image format - no base64 data")

    parsed = EncodedImageBlob.parse(blob)
    payload = parsed.payload
    # début du payload, pour le diagnostic opérateur (HEADER_PREFIX_LENGTH)
    header = parsed.header_prefix(cfg.header_prefix_length)

    min_len = cfg.min_payload_length[mode]
    if len(payload) < min_len:
        return _fail(
            INSUFFICIENT_QUALITY,
            f"Image quality too low - data length: {len(payload)}, minimum required: {min_len}",
            header=header,
        )

    if cfg.min_complexity_ratio > 0:
        ratio = complexity_ratio(payload)
        if ratio < cfg.min_complexity_ratio:
            return _fail(
                INSUFFICIENT_QUALITY,
                f"Image complexity too low - unique characters: {len(set(payload))}/64, "
                f"minimum required: {cfg.min_complexity_ratio * 100:.0f}%",
                score=ratio,
                header=header,
            )

    if mode in cfg.signature_modes and parsed.detected_format is None:
        return _fail(
            INSUFFICIENT_QUALITY,
            "Invalid image header - expected one of " + ", ".join(FORMAT_SIGNATURES.values())
            + f", got '{header}'",
            header=header,
        )

    if cfg.min_entropy > 0:
        entropy = shannon_entropy(payload)
        if entropy < cfg.min_entropy:
            return _fail(
                INSUFFICIENT_QUALITY,
                f"Image entropy too low: {entropy:.2f}, minimum required: {cfg.min_entropy}",
                score=entropy / 6,
                header=header,
            )

    return BlobValidation(valid=True, score=1.0, reason="Valid image capture", code=OK, blob=parsed,
                          header_prefix=header)
