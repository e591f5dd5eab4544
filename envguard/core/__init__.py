"""Core package for envguard."""

from envguard.core.classifier import SecretClassifier, HeuristicRule, Verdict, mask_value
from envguard.core.entropy import shannon_entropy
from envguard.core.inference import infer_value_type
from envguard.core.patterns import DetectionRules, KeyNameScorer, ServicePatternMatcher
from envguard.core.models import ClassifierConfig, Finding, Record, ServiceMatch, ValueType
from envguard.core.exceptions import ConfigurationError, EnvGuardError

__all__ = [
    "SecretClassifier",
    "HeuristicRule",
    "Verdict",
    "mask_value",
    "shannon_entropy",
    "infer_value_type",
    "DetectionRules",
    "KeyNameScorer",
    "ServicePatternMatcher",
    "ClassifierConfig",
    "Finding",
    "Record",
    "ServiceMatch",
    "ValueType",
    "ConfigurationError",
    "EnvGuardError",
]
