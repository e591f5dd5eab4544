"""envguard - .env validation and secret detection."""

__version__ = "0.1.0"
__author__ = "envguard maintainers"

from envguard.core.classifier import SecretClassifier, detect_secrets, mask_value
from envguard.core.models import (
    ClassifierConfig,
    Finding,
    Record,
    Severity,
    ValueType,
)

__all__ = [
    "ClassifierConfig",
    "Finding",
    "Record",
    "SecretClassifier",
    "Severity",
    "ValueType",
    "detect_secrets",
    "mask_value",
    "__version__",
]
