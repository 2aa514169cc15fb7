import math
from collections import Counter
from dataclasses import dataclass
from typing import Optional

DATA_URL_PREFIX = "data:image/"
BASE64_MARKER = "base64,"
BASE64_ALPHABET_SIZE = 64

# Signatures base64 des formats acceptés (JPEG, PNG, GIF)
FORMAT_SIGNATURES = {
    "jpeg": "/9j/",
    "png": "iVBOR",
    "gif": "R0lGOD",
}


@dataclass(frozen=True)
class EncodedImageBlob:
    raw: str
    subtype: str
    payload: str

    @property
    def byte_length(self) -> int:
        # longueur du texte base64, pas la taille réelle de l'image
        return len(self.payload)

    def header_prefix(self, n: int) -> str:
        return self.payload[:n]

    @property
    def detected_format(self) -> Optional[str]:
        for fmt, sig in FORMAT_SIGNATURES.items():
            if self.payload.startswith(sig):
                return fmt
        return None

    @classmethod
    def parse(cls, value) -> Optional["EncodedImageBlob"]:
        """Retourne None si la valeur n'a pas la forme data:image/...;base64,<payload>."""
        if not isinstance(value, str) or not value.startswith(DATA_URL_PREFIX):
            return None
        idx = value.find(BASE64_MARKER)
        if idx == -1:
            return None
        head = value[len(DATA_URL_PREFIX):idx]
        subtype = head.split(";", 1)[0]
        return cls(raw=value, subtype=subtype, payload=value[idx + len(BASE64_MARKER):])


def shannon_entropy(data: str) -> float:
    """Entropie de Shannon en bits/symbole (max 6 pour l'alphabet base64)."""
    n = len(data)
    if not n:
        return 0.0
    h = 0.0
    for count in Counter(data).values():
        p = count / n
        h -= p * math.log2(p)
    return h


def complexity_ratio(data: str) -> float:
    return len(set(data)) / BASE64_ALPHABET_SIZE
