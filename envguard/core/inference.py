"""Recognise values whose shape makes them definitionally not secrets."""

import re
from typing import List, Tuple

from envguard.core.models import TypeInference, ValueType

# Compiled once at module load; evaluated in this order, first match wins.
_TYPE_CHECKS: List[Tuple[ValueType, re.Pattern, float]] = [
    (ValueType.URL, re.compile(r"^(?:https?|wss?|ftp)://", re.IGNORECASE), 0.99),
    (
        ValueType.UUID,
        re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
            re.IGNORECASE,
        ),
        0.98,
    ),
    (ValueType.PUBLIC_KEY, re.compile(r"^-----BEGIN (?:RSA |EC )?PUBLIC KEY-----"), 0.99),
    (
        ValueType.BOOLEAN,
        re.compile(r"^(?:true|false|yes|no|on|off|enabled?|disabled?)$", re.IGNORECASE),
        0.95,
    ),
    (ValueType.NUMBER, re.compile(r"^-?\d+(?:\.\d+)?$"), 0.95),
    (ValueType.EMAIL, re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"), 0.9),
    (ValueType.PATH, re.compile(r"^(?:/|\./|\.\./|[A-Za-z]:[\\/])"), 0.85),
    (ValueType.COLOR, re.compile(r"^#[0-9a-fA-F]{3,8}$"), 0.95),
]

UNKNOWN = TypeInference(ValueType.UNKNOWN, 0.0)

UUID_SHAPE = _TYPE_CHECKS[1][1]


def infer_value_type(value: str) -> TypeInference:
    """
    Classify a raw value into a benign semantic type.

    Args:
        value: Non-empty value taken from a KEY=VALUE line

    Returns:
        The first matching type with its confidence, or ``unknown`` with 0.0
    """
    for value_type, pattern, confidence in _TYPE_CHECKS:
        if pattern.search(value):
            return TypeInference(value_type, confidence)
    return UNKNOWN


def is_uuid(value: str) -> bool:
    """Check whether a value is a canonical 8-4-4-4-12 UUID."""
    return UUID_SHAPE.match(value) is not None
