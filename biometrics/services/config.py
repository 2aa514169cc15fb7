"""
Profil de configuration du moteur de comparaison biométrique.

Toutes les constantes (longueurs minimales, seuils, poids, fenêtres) sont
nommées ici avec un profil par défaut unique. Surcharge via settings.BIOMETRICS
(clés en majuscules), validée au démarrage de l'app (AppConfig.ready).
"""
import math
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Dict, Mapping, Optional, Tuple

from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver

MODE_REGISTRATION = "registration"
MODE_VERIFICATION = "verification"
MODES = (MODE_REGISTRATION, MODE_VERIFICATION)


class ConfigurationError(ImproperlyConfigured):
    """Profil invalide (erreur de programmation, jamais une erreur de donnée)."""


@dataclass(frozen=True)
class ScoreWeights:
    length: float = 0.10
    window: float = 0.60
    frequency: float = 0.10
    entropy: float = 0.10
    statistical: float = 0.10

    def as_dict(self) -> Dict[str, float]:
        return {
            "length": self.length,
            "window": self.window,
            "frequency": self.frequency,
            "entropy": self.entropy,
            "statistical": self.statistical,
        }


@dataclass(frozen=True)
class WindowSpec:
    size: int = 100
    stride: int = 100
    max_windows: int = 400
    best_blend: float = 0.2  # part de la meilleure fenêtre dans le score fenêtré


@dataclass(frozen=True)
class FrequencySpec:
    ngram: int = 1
    stride: int = 1


@dataclass(frozen=True)
class StatisticalSpec:
    moments: int = 2  # 2 = moyenne+variance ; 4 = + skewness/kurtosis
    sample_size: int = 15000


@dataclass(frozen=True)
class MatchingConfig:
    min_payload_length: Mapping[str, int] = field(
        default_factory=lambda: {MODE_REGISTRATION: 20000, MODE_VERIFICATION: 15000}
    )
    min_complexity_ratio: float = 0.85
    min_entropy: float = 4.5
    signature_modes: Tuple[str, ...] = (MODE_REGISTRATION,)
    verification_threshold: float = 0.65
    duplicate_threshold: float = 0.55
    weights: ScoreWeights = field(default_factory=ScoreWeights)
    window: WindowSpec = field(default_factory=WindowSpec)
    frequency: FrequencySpec = field(default_factory=FrequencySpec)
    statistical: StatisticalSpec = field(default_factory=StatisticalSpec)
    length_floor: float = 0.0
    header_prefix_length: int = 16

    def with_overrides(self, **changes) -> "MatchingConfig":
        return validate_config(replace(self, **changes))


def _check_unit(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"BIOMETRICS {name} must be within [0, 1], got {value!r}")


def _check_positive(name: str, value: int) -> None:
    if not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"BIOMETRICS {name} must be a positive integer, got {value!r}")


def validate_config(cfg: MatchingConfig) -> MatchingConfig:
    for mode in MODES:
        if mode not in cfg.min_payload_length:
            raise ConfigurationError(f"BIOMETRICS MIN_PAYLOAD_LENGTH missing mode '{mode}'")
        value = cfg.min_payload_length[mode]
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigurationError(f"BIOMETRICS MIN_PAYLOAD_LENGTH[{mode}] must be an integer >= 0, got {value!r}")
    for mode in cfg.signature_modes:
        if mode not in MODES:
            raise ConfigurationError(f"BIOMETRICS SIGNATURE_MODES: unknown mode '{mode}'")

    _check_unit("MIN_COMPLEXITY_RATIO", cfg.min_complexity_ratio)
    _check_unit("VERIFICATION_THRESHOLD", cfg.verification_threshold)
    _check_unit("DUPLICATE_THRESHOLD", cfg.duplicate_threshold)
    _check_unit("LENGTH_FLOOR", cfg.length_floor)
    _check_unit("WINDOW.best_blend", cfg.window.best_blend)
    if cfg.min_entropy < 0 or cfg.min_entropy > 6:
        raise ConfigurationError("BIOMETRICS MIN_ENTROPY must be within [0, 6] (bits/symbole base64)")

    # Inscription plus stricte que le vote: doublon détecté plus tôt.
    if cfg.duplicate_threshold > cfg.verification_threshold:
        raise ConfigurationError(
            "BIOMETRICS DUPLICATE_THRESHOLD must be <= VERIFICATION_THRESHOLD "
            f"({cfg.duplicate_threshold} > {cfg.verification_threshold})"
        )

    weights = cfg.weights.as_dict()
    for name, w in weights.items():
        if w < 0:
            raise ConfigurationError(f"BIOMETRICS WEIGHTS.{name} must be >= 0")
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-6:
        raise ConfigurationError(f"BIOMETRICS WEIGHTS must sum to 1.0, got {total:.6f}")

    _check_positive("WINDOW.size", cfg.window.size)
    _check_positive("WINDOW.stride", cfg.window.stride)
    _check_positive("WINDOW.max_windows", cfg.window.max_windows)
    _check_positive("FREQUENCY.ngram", cfg.frequency.ngram)
    _check_positive("FREQUENCY.stride", cfg.frequency.stride)
    _check_positive("STATISTICAL.sample_size", cfg.statistical.sample_size)
    if cfg.statistical.moments not in (2, 4):
        raise ConfigurationError("BIOMETRICS STATISTICAL.moments must be 2 or 4")
    _check_positive("HEADER_PREFIX_LENGTH", cfg.header_prefix_length)
    return cfg


def load_config(overrides: Optional[Mapping] = None) -> MatchingConfig:
    """
    Construit un MatchingConfig depuis un dict au format settings.BIOMETRICS:
      {"VERIFICATION_THRESHOLD": 0.65, "WEIGHTS": {"window": 0.6, ...}, ...}
    Les clés absentes gardent le profil par défaut.
    """
    o = dict(overrides or {})
    base = MatchingConfig()
    known = {
        "MIN_PAYLOAD_LENGTH", "MIN_COMPLEXITY_RATIO", "MIN_ENTROPY", "SIGNATURE_MODES",
        "VERIFICATION_THRESHOLD", "DUPLICATE_THRESHOLD", "WEIGHTS", "WINDOW",
        "FREQUENCY", "STATISTICAL", "LENGTH_FLOOR", "HEADER_PREFIX_LENGTH",
    }
    unknown = set(o) - known
    if unknown:
        raise ConfigurationError(f"BIOMETRICS unknown keys: {sorted(unknown)}")

    try:
        cfg = MatchingConfig(
            min_payload_length={mode: int(value) for mode, value in
                                {**base.min_payload_length, **o.get("MIN_PAYLOAD_LENGTH", {})}.items()},
            min_complexity_ratio=float(o.get("MIN_COMPLEXITY_RATIO", base.min_complexity_ratio)),
            min_entropy=float(o.get("MIN_ENTROPY", base.min_entropy)),
            signature_modes=tuple(o.get("SIGNATURE_MODES", base.signature_modes)),
            verification_threshold=float(o.get("VERIFICATION_THRESHOLD", base.verification_threshold)),
            duplicate_threshold=float(o.get("DUPLICATE_THRESHOLD", base.duplicate_threshold)),
            weights=ScoreWeights(**{**base.weights.as_dict(), **o.get("WEIGHTS", {})}),
            window=replace(base.window, **o.get("WINDOW", {})),
            frequency=replace(base.frequency, **o.get("FREQUENCY", {})),
            statistical=replace(base.statistical, **o.get("STATISTICAL", {})),
            length_floor=float(o.get("LENGTH_FLOOR", base.length_floor)),
            header_prefix_length=int(o.get("HEADER_PREFIX_LENGTH", base.header_prefix_length)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"BIOMETRICS invalid value: {e}")
    return validate_config(cfg)


@lru_cache(maxsize=1)
def get_config() -> MatchingConfig:
    from django.conf import settings
    return load_config(getattr(settings, "BIOMETRICS", None))


@receiver(setting_changed)
def _reset_config(*, setting, **kwargs):
    if setting == "BIOMETRICS":
        get_config.cache_clear()
