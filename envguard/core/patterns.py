"""Service credential catalog and key-name heuristics."""

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import yaml

from envguard.core.exceptions import PatternLoadError
from envguard.core.models import ServiceMatch
from envguard.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent.parent / "config" / "service_patterns.yaml"


def _check_score(value: Any, field_name: str, entry_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PatternLoadError(
            f"{field_name} for '{entry_name}' must be a number",
            details={"entry": entry_name, field_name: value},
        )
    if not 0.0 <= value <= 1.0:
        raise PatternLoadError(
            f"{field_name} for '{entry_name}' must be between 0 and 1, got {value}",
            details={"entry": entry_name, field_name: value},
        )
    return float(value)


def _compile(pattern: str, flags: int, entry_name: str) -> re.Pattern:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise PatternLoadError(
            f"Invalid regular expression for '{entry_name}': {e}",
            details={"entry": entry_name, "pattern": pattern},
        )


class ServicePattern:
    """A fixed-format credential signature."""

    def __init__(
        self,
        name: str,
        pattern: str,
        confidence: float,
        ignorecase: bool = False,
    ):
        """Initialize a service pattern."""
        self.name = name
        self.confidence = _check_score(confidence, "confidence", name)
        self.pattern = _compile(pattern, re.IGNORECASE if ignorecase else 0, name)

    def matches(self, value: str) -> bool:
        return self.pattern.search(value) is not None

    def __repr__(self) -> str:
        return f"ServicePattern({self.name!r}, confidence={self.confidence})"


class KeyNamePattern:
    """A weighted pattern tested against variable names."""

    def __init__(self, pattern: str, weight: float):
        self.weight = _check_score(weight, "weight", pattern)
        self.pattern = _compile(pattern, re.IGNORECASE, pattern)

    def matches(self, key: str) -> bool:
        return self.pattern.search(key) is not None

    def __repr__(self) -> str:
        return f"KeyNamePattern({self.pattern.pattern!r}, weight={self.weight})"


@dataclass(frozen=True)
class DetectionRules:
    """Immutable, ordered detection tables shared by every classification."""

    service_patterns: Tuple[ServicePattern, ...]
    key_patterns: Tuple[KeyNamePattern, ...]

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "DetectionRules":
        """Build rules from the parsed YAML structure."""
        if not isinstance(config, dict):
            raise PatternLoadError("Detection rules must be a mapping")

        service_patterns = []
        for pattern_def in config.get("service_patterns") or []:
            try:
                service_patterns.append(
                    ServicePattern(
                        name=pattern_def["name"],
                        pattern=pattern_def["pattern"],
                        confidence=pattern_def["confidence"],
                        ignorecase=bool(pattern_def.get("ignorecase", False)),
                    )
                )
            except (KeyError, TypeError) as e:
                raise PatternLoadError(
                    f"Malformed service pattern entry: {pattern_def!r}",
                    details={"missing": str(e)},
                )

        key_patterns = []
        for pattern_def in config.get("key_patterns") or []:
            try:
                key_patterns.append(
                    KeyNamePattern(pattern=pattern_def["pattern"], weight=pattern_def["weight"])
                )
            except (KeyError, TypeError) as e:
                raise PatternLoadError(
                    f"Malformed key pattern entry: {pattern_def!r}",
                    details={"missing": str(e)},
                )

        return cls(service_patterns=tuple(service_patterns), key_patterns=tuple(key_patterns))

    @classmethod
    def from_file(cls, patterns_file: Union[str, Path]) -> "DetectionRules":
        """Load detection rules from a YAML file."""
        try:
            with open(patterns_file, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise PatternLoadError(
                f"Failed to load patterns file: {e}",
                details={"path": str(patterns_file)},
            )

        rules = cls.from_dict(config or {})
        logger.info(
            "Loaded %d service patterns and %d key patterns from %s",
            len(rules.service_patterns),
            len(rules.key_patterns),
            patterns_file,
        )
        return rules

    @classmethod
    def default(cls) -> "DetectionRules":
        """Rules bundled with the package, loaded once per process."""
        return _load_default_rules()


@lru_cache(maxsize=1)
def _load_default_rules() -> DetectionRules:
    return DetectionRules.from_file(DEFAULT_RULES_PATH)


class ServicePatternMatcher:
    """Tests values against the ordered service catalog."""

    def __init__(self, patterns: Iterable[ServicePattern]):
        self.patterns: Tuple[ServicePattern, ...] = tuple(patterns)

    def match(self, value: str) -> Optional[ServiceMatch]:
        """
        Find the first cataloged credential format that matches a value.

        Args:
            value: The raw value

        Returns:
            ServiceMatch carrying the pattern's label and confidence, or None
        """
        for pattern in self.patterns:
            if pattern.matches(value):
                return ServiceMatch(reason=pattern.name, confidence=pattern.confidence)
        return None


class KeyNameScorer:
    """Scores how strongly a variable name suggests a credential."""

    def __init__(self, patterns: Iterable[KeyNamePattern]):
        self.patterns: Tuple[KeyNamePattern, ...] = tuple(patterns)

    def score(self, key: str) -> float:
        """Return the highest weight among matching patterns, 0.0 when none match."""
        return max((p.weight for p in self.patterns if p.matches(key)), default=0.0)
