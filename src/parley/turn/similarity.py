"""Text and confidence stability measures for recognizer output."""

from __future__ import annotations

import math
from collections.abc import Sequence


def _word_set(text: str) -> set[str]:
    return {w for w in text.lower().split() if w}


def text_similarity(a: str, b: str) -> float:
    """Jaccard similarity of the word sets of *a* and *b* (0.0 to 1.0)."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    words_a = _word_set(a)
    words_b = _word_set(b)
    if not words_a or not words_b:
        return 0.0
    intersection = len(words_a & words_b)
    union = len(words_a) + len(words_b) - intersection
    return intersection / union


def confidence_spread(confidences: Sequence[float]) -> float:
    """Population standard deviation of *confidences*; 0.0 for fewer than two."""
    if len(confidences) < 2:
        return 0.0
    mean = sum(confidences) / len(confidences)
    squared = sum((c - mean) ** 2 for c in confidences)
    return math.sqrt(squared / len(confidences))
