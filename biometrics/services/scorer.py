"""
Score de similarité composite entre deux captures encodées.

⚠️ Heuristique non cryptographique sur le TEXTE base64 (longueurs, fenêtres,
fréquences, entropie, moments). Ne reconnaît pas un visage; conservé tel quel,
ne pas utiliser comme vérification d'identité en production.

Propriétés garanties: déterministe, borné dans [0, 1], réflexif pour une
capture valide, symétrique (score(a, b) == score(b, a) au bit près).
"""
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import MatchingConfig, MODE_VERIFICATION, get_config
from .blob import shannon_entropy
from .validator import validate_image_blob

logger = logging.getLogger("voteguard.biometrics")

EXACT_MATCH = "EXACT_MATCH"
INVALID_INPUT = "INVALID_INPUT"
COMPOSITE = "COMPOSITE"


@dataclass
class MetricScore:
    value: float
    weight: float


@dataclass
class SimilarityScore:
    score: float
    reason: str
    breakdown: Dict[str, MetricScore] = field(default_factory=dict)

    def breakdown_dict(self) -> Dict[str, Dict[str, float]]:
        return {k: {"value": m.value, "weight": m.weight} for k, m in self.breakdown.items()}


def _clamp(x: float) -> float:
    return min(1.0, max(0.0, x))


def _ratio_similarity(x: float, y: float) -> float:
    # 1 - |x-y| / max(|x|,|y|) ; deux valeurs nulles => identiques
    m = max(abs(x), abs(y))
    if m == 0:
        return 1.0
    return _clamp(1.0 - abs(x - y) / m)


def length_similarity(p1: str, p2: str, floor: float = 0.0) -> float:
    longest = max(len(p1), len(p2))
    if not longest:
        return 0.0
    return max(floor, min(len(p1), len(p2)) / longest)


def window_similarity(p1: str, p2: str, size: int, stride: int, max_windows: int, best_blend: float) -> float:
    shared = min(len(p1), len(p2))
    if not shared:
        return 0.0
    if shared < size:
        starts = [0]
        size = shared
    else:
        starts = list(range(0, shared - size + 1, stride))[:max_windows]

    ratios: List[float] = []
    for start in starts:
        w1 = p1[start:start + size]
        w2 = p2[start:start + size]
        matches = sum(1 for c1, c2 in zip(w1, w2) if c1 == c2)
        ratios.append(matches / size)

    avg = sum(ratios) / len(ratios)
    return _clamp(avg * (1.0 - best_blend) + max(ratios) * best_blend)


def _ngram_counts(data: str, n: int, stride: int) -> Counter:
    return Counter(data[i:i + n] for i in range(0, len(data) - n + 1, stride))


def frequency_similarity(p1: str, p2: str, ngram: int = 1, stride: int = 1) -> float:
    f1 = _ngram_counts(p1, ngram, stride)
    f2 = _ngram_counts(p2, ngram, stride)
    symbols = sorted(set(f1) | set(f2))  # ordre fixe => somme reproductible et symétrique
    if not symbols:
        return 0.0
    total = 0.0
    for s in symbols:
        a, b = f1.get(s, 0), f2.get(s, 0)
        total += min(a, b) / max(a, b)
    return total / len(symbols)


def entropy_similarity(p1: str, p2: str) -> float:
    return _ratio_similarity(shannon_entropy(p1), shannon_entropy(p2))


def _moments(data: str, moments: int) -> List[float]:
    values = [ord(c) for c in data]
    n = len(values)
    if not n:
        return [0.0] * moments
    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / n
    stats = [mean, variance]
    if moments == 4:
        std = math.sqrt(variance)
        if std == 0:
            stats += [0.0, 0.0]
        else:
            stats.append(sum(((v - mean) / std) ** 3 for v in values) / n)
            stats.append(sum(((v - mean) / std) ** 4 for v in values) / n - 3.0)
    return stats


def statistical_similarity(p1: str, p2: str, moments: int = 2, sample_size: int = 15000) -> float:
    s1 = _moments(p1[:sample_size], moments)
    s2 = _moments(p2[:sample_size], moments)
    return sum(_ratio_similarity(a, b) for a, b in zip(s1, s2)) / len(s1)


def score_similarity(blob_a, blob_b, config: Optional[MatchingConfig] = None) -> SimilarityScore:
    cfg = config or get_config()

    va = validate_image_blob(blob_a, MODE_VERIFICATION, cfg)
    vb = validate_image_blob(blob_b, MODE_VERIFICATION, cfg)
    if not va.valid or not vb.valid:
        logger.info("score: invalid input (a=%s, b=%s)", va.code, vb.code)
        return SimilarityScore(score=0.0, reason=INVALID_INPUT)

    if blob_a == blob_b:
        return SimilarityScore(score=1.0, reason=EXACT_MATCH)

    p1, p2 = va.blob.payload, vb.blob.payload
    w = cfg.weights
    metrics = {
        "length": MetricScore(length_similarity(p1, p2, cfg.length_floor), w.length),
        "window": MetricScore(
            window_similarity(p1, p2, cfg.window.size, cfg.window.stride,
                              cfg.window.max_windows, cfg.window.best_blend),
            w.window,
        ),
        "frequency": MetricScore(
            frequency_similarity(p1, p2, cfg.frequency.ngram, cfg.frequency.stride), w.frequency
        ),
        "entropy": MetricScore(entropy_similarity(p1, p2), w.entropy),
        "statistical": MetricScore(
            statistical_similarity(p1, p2, cfg.statistical.moments, cfg.statistical.sample_size),
            w.statistical,
        ),
    }
    total = _clamp(sum(m.value * m.weight for m in metrics.values()))
    logger.debug(
        "score=%.4f %s", total,
        " ".join(f"{k}={m.value:.3f}x{m.weight}" for k, m in metrics.items()),
    )
    return SimilarityScore(score=total, reason=COMPOSITE, breakdown=metrics)
