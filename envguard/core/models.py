"""Core domain models for envguard."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional

from envguard.core.exceptions import ConfigurationError, ValidationError

DEFAULT_MIN_CONFIDENCE = 0.7


class Severity(str, Enum):
    """Display severity derived from a finding's confidence."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @classmethod
    def from_confidence(cls, confidence: float) -> "Severity":
        if confidence >= 0.9:
            return cls.CRITICAL
        if confidence >= 0.8:
            return cls.HIGH
        return cls.MEDIUM


class ValueType(str, Enum):
    """Benign semantic types a value can be recognised as."""

    URL = "url"
    UUID = "uuid"
    BOOLEAN = "boolean"
    NUMBER = "number"
    EMAIL = "email"
    PATH = "path"
    PUBLIC_KEY = "public_key"
    COLOR = "color"
    UNKNOWN = "unknown"


class DetectionSource(str, Enum):
    """Which detector produced a finding."""

    SERVICE_PATTERN = "service_pattern"
    HEURISTIC = "heuristic"


def clamp_confidence(value: float) -> float:
    """Bound a confidence score to [0, 1]."""
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class Record:
    """A single KEY=VALUE line taken from a configuration file."""

    key: str
    value: str
    line_number: int

    def __post_init__(self) -> None:
        if self.line_number < 1:
            raise ValidationError(
                f"Line number must be positive, got {self.line_number}",
                details={"key": self.key},
            )


@dataclass(frozen=True)
class TypeInference:
    """Result of running the value type inferencer."""

    type: ValueType
    confidence: float

    @property
    def is_benign(self) -> bool:
        return self.type != ValueType.UNKNOWN


@dataclass(frozen=True)
class ServiceMatch:
    """A value matched one of the cataloged credential formats."""

    reason: str
    confidence: float
    is_secret: bool = True


@dataclass(frozen=True)
class Finding:
    """A record that was classified as a likely secret."""

    key: str
    masked_value: str
    line_number: int
    reason: str
    confidence: float
    source: DetectionSource = DetectionSource.SERVICE_PATTERN

    @property
    def severity(self) -> Severity:
        return Severity.from_confidence(self.confidence)

    @property
    def confidence_percent(self) -> int:
        return int(round(self.confidence * 100))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "key": self.key,
            "masked_value": self.masked_value,
            "line_number": self.line_number,
            "reason": self.reason,
            "confidence": round(self.confidence, 4),
            "severity": self.severity.value,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class ClassifierConfig:
    """Per-run settings for the secret classifier.

    ``allow_list`` holds variable names that are never reported and
    ``min_confidence`` is the cutoff a finding must reach to be emitted.
    """

    allow_list: FrozenSet[str] = field(default_factory=frozenset)
    min_confidence: float = DEFAULT_MIN_CONFIDENCE

    def __post_init__(self) -> None:
        if isinstance(self.allow_list, str):
            raise ConfigurationError(
                "allow_list must be a collection of key names, not a string",
                details={"allow_list": self.allow_list},
            )
        try:
            allow_list = frozenset(self.allow_list or ())
        except TypeError:
            raise ConfigurationError(
                f"allow_list must be a collection of key names, got {type(self.allow_list).__name__}",
                details={"allow_list": self.allow_list},
            )
        object.__setattr__(self, "allow_list", allow_list)

        confidence = self.min_confidence
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ConfigurationError(
                f"min_confidence must be a number, got {type(confidence).__name__}",
                details={"min_confidence": confidence},
            )
        # NaN fails both comparisons
        if not 0.0 <= confidence <= 1.0:
            raise ConfigurationError(
                f"min_confidence must be between 0 and 1, got {confidence}",
                details={"min_confidence": confidence},
            )
        object.__setattr__(self, "min_confidence", float(confidence))

    @classmethod
    def build(
        cls,
        allow_list: Optional[Iterable[str]] = None,
        min_confidence: Optional[float] = None,
    ) -> "ClassifierConfig":
        """Create a config, falling back to defaults for missing values."""
        return cls(
            allow_list=frozenset(allow_list or ()),
            min_confidence=DEFAULT_MIN_CONFIDENCE if min_confidence is None else min_confidence,
        )
