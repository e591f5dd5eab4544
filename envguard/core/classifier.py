"""Secret classifier for KEY=VALUE records.

Each record runs through an ordered list of stages. A stage either decides
(skip or flag) or passes the record on to the next one:

1. allow-list and empty values
2. benign value types (URL, UUID, boolean, number, email, path, public key,
   color)
3. the service pattern catalog
4. key-name gated entropy heuristics, themselves an ordered rule list

The first stage that decides wins, so a record yields at most one finding.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from envguard.core.entropy import shannon_entropy
from envguard.core.exceptions import ConfigurationError
from envguard.core.inference import infer_value_type, is_uuid
from envguard.core.models import (
    ClassifierConfig,
    DetectionSource,
    Finding,
    Record,
    clamp_confidence,
)
from envguard.core.patterns import DetectionRules, KeyNameScorer, ServicePatternMatcher
from envguard.utils.logger import get_logger

logger = get_logger(__name__)

REDACTION_MARKER = "***"
MASK_VISIBLE_CHARS = 4

_LOOSE_BASE64 = re.compile(r"^[A-Za-z0-9+/]{48,}={0,2}$")
_LONG_HEX = re.compile(r"^[0-9a-fA-F]{40,}$")


def mask_value(value: str) -> str:
    """Redact a value, keeping the first and last four characters of long ones."""
    if len(value) <= MASK_VISIBLE_CHARS * 2:
        return REDACTION_MARKER
    return f"{value[:MASK_VISIBLE_CHARS]}{REDACTION_MARKER}{value[-MASK_VISIBLE_CHARS:]}"


@dataclass(frozen=True)
class Evidence:
    """Signals gathered for a record before the heuristic rules run."""

    key: str
    value: str
    key_score: float
    entropy: float

    @property
    def length(self) -> int:
        return len(self.value)


@dataclass(frozen=True)
class HeuristicRule:
    """A predicate over the evidence and the confidence it yields."""

    reason: str
    applies: Callable[[Evidence], bool]
    confidence: Callable[[Evidence], float]


HEURISTIC_RULES: Tuple[HeuristicRule, ...] = (
    HeuristicRule(
        reason="high entropy with secret-like key name",
        applies=lambda e: e.entropy > 4.5 and e.length > 20,
        confidence=lambda e: min(0.95, e.key_score * 0.7 + (e.entropy / 8) * 0.3),
    ),
    HeuristicRule(
        reason="very high entropy",
        applies=lambda e: e.entropy > 5.0 and e.length > 32,
        confidence=lambda e: min(0.9, e.key_score * 0.6 + (e.entropy / 8) * 0.4),
    ),
    HeuristicRule(
        reason="base64-like data with secret key name",
        applies=lambda e: _LOOSE_BASE64.match(e.value) is not None and e.entropy > 4.0,
        confidence=lambda e: min(0.85, e.key_score * 0.7 + 0.15),
    ),
    HeuristicRule(
        reason="long hex string with secret key name",
        applies=lambda e: _LONG_HEX.match(e.value) is not None and not is_uuid(e.value),
        confidence=lambda e: min(0.85, e.key_score * 0.7 + 0.15),
    ),
)


@dataclass(frozen=True)
class Verdict:
    """Outcome of classifying one record."""

    flagged: bool
    reason: str
    confidence: float = 0.0
    source: Optional[DetectionSource] = None

    @classmethod
    def skip(cls, reason: str) -> "Verdict":
        return cls(flagged=False, reason=reason)

    @classmethod
    def flag(cls, reason: str, confidence: float, source: DetectionSource) -> "Verdict":
        return cls(flagged=True, reason=reason, confidence=clamp_confidence(confidence), source=source)


Stage = Callable[[Record, ClassifierConfig], Optional[Verdict]]


class SecretClassifier:
    """
    Decides whether configuration values hold credentials.

    The detection tables are injected at construction and never modified, so
    one classifier can be shared freely across runs and threads.
    """

    def __init__(
        self,
        rules: Optional[DetectionRules] = None,
        heuristic_rules: Sequence[HeuristicRule] = HEURISTIC_RULES,
    ):
        """
        Initialize the classifier.

        Args:
            rules: Service catalog and key-name table (bundled rules by default)
            heuristic_rules: Ordered entropy rules applied when no service matches
        """
        rules = rules if rules is not None else DetectionRules.default()
        self.matcher = ServicePatternMatcher(rules.service_patterns)
        self.key_scorer = KeyNameScorer(rules.key_patterns)
        self.heuristic_rules: Tuple[HeuristicRule, ...] = tuple(heuristic_rules)
        self._stages: Tuple[Stage, ...] = (
            self._check_skip_conditions,
            self._check_value_type,
            self._check_service_patterns,
            self._check_heuristics,
        )

    def classify(
        self, records: Iterable[Record], config: Optional[ClassifierConfig] = None
    ) -> List[Finding]:
        """
        Classify records, returning findings in input order.

        Args:
            records: Parsed KEY=VALUE records
            config: Allow-list and confidence cutoff (defaults when omitted)

        Returns:
            At most one Finding per record, for records judged to be secrets

        Raises:
            ConfigurationError: If config is not a valid ClassifierConfig
        """
        config = self._validate_config(config)
        findings: List[Finding] = []
        for record in records:
            finding = self._classify(record, config)
            if finding is not None:
                findings.append(finding)
        return findings

    def classify_record(
        self, record: Record, config: Optional[ClassifierConfig] = None
    ) -> Optional[Finding]:
        """Classify a single record."""
        return self._classify(record, self._validate_config(config))

    def evaluate(self, record: Record, config: Optional[ClassifierConfig] = None) -> Verdict:
        """Return the full decision for a record, including why it was skipped."""
        config = self._validate_config(config)
        for stage in self._stages:
            verdict = stage(record, config)
            if verdict is not None:
                return verdict
        return Verdict.skip("no rule matched")

    def _classify(self, record: Record, config: ClassifierConfig) -> Optional[Finding]:
        verdict = self.evaluate(record, config)
        if not verdict.flagged:
            logger.debug("Line %d %s: skipped (%s)", record.line_number, record.key, verdict.reason)
            return None

        return Finding(
            key=record.key,
            masked_value=mask_value(record.value),
            line_number=record.line_number,
            reason=verdict.reason,
            confidence=verdict.confidence,
            source=verdict.source,
        )

    @staticmethod
    def _validate_config(config: Optional[ClassifierConfig]) -> ClassifierConfig:
        if config is None:
            return ClassifierConfig()
        if not isinstance(config, ClassifierConfig):
            raise ConfigurationError(
                f"Expected ClassifierConfig, got {type(config).__name__}",
            )
        return config

    def _check_skip_conditions(self, record: Record, config: ClassifierConfig) -> Optional[Verdict]:
        if record.key in config.allow_list:
            return Verdict.skip("key is allow-listed")
        if not record.value:
            return Verdict.skip("empty value")
        return None

    def _check_value_type(self, record: Record, config: ClassifierConfig) -> Optional[Verdict]:
        inference = infer_value_type(record.value)
        # TODO: UUID values under credential-like keys (API_KEY=<uuid>) are skipped here too;
        # revisit once there is a decision on flagging them.
        if inference.is_benign:
            return Verdict.skip(f"value looks like {inference.type.value}")
        return None

    def _check_service_patterns(self, record: Record, config: ClassifierConfig) -> Optional[Verdict]:
        match = self.matcher.match(record.value)
        if match is not None and match.confidence >= config.min_confidence:
            return Verdict.flag(match.reason, match.confidence, DetectionSource.SERVICE_PATTERN)
        return None

    def _check_heuristics(self, record: Record, config: ClassifierConfig) -> Verdict:
        key_score = self.key_scorer.score(record.key)
        if key_score == 0:
            return Verdict.skip("key name does not suggest a secret")

        evidence = Evidence(
            key=record.key,
            value=record.value,
            key_score=key_score,
            entropy=shannon_entropy(record.value),
        )
        for rule in self.heuristic_rules:
            if not rule.applies(evidence):
                continue
            confidence = clamp_confidence(rule.confidence(evidence))
            if confidence >= config.min_confidence:
                return Verdict.flag(rule.reason, confidence, DetectionSource.HEURISTIC)
            return Verdict.skip(f"{rule.reason} below confidence threshold")

        return Verdict.skip("no heuristic matched")


def detect_secrets(
    records: Iterable[Record],
    allow_list: Optional[Iterable[str]] = None,
    min_confidence: Optional[float] = None,
) -> List[Finding]:
    """Classify records with the bundled rules."""
    config = ClassifierConfig.build(allow_list=allow_list, min_confidence=min_confidence)
    return SecretClassifier().classify(records, config)
