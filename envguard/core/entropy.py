"""Shannon entropy used as a randomness measure for values."""

import math
from collections import Counter


def shannon_entropy(data: str) -> float:
    """
    Calculate Shannon entropy of a string.

    Args:
        data: String to analyze

    Returns:
        Entropy in bits per character (0.0 for an empty string)
    """
    if not data:
        return 0.0

    length = len(data)
    entropy = 0.0
    for count in Counter(data).values():
        probability = count / length
        entropy -= probability * math.log2(probability)

    return entropy
