"""Utterance closure policy.

Decides, for the text buffered so far, whether the speaker has finished a
thought.  Rules are evaluated in order and the first applicable one wins:

1. too few words                    -> keep open
2. low mean confidence              -> keep open
3. unstable confidence (optional)   -> keep open
4. filler / acknowledgement only    -> keep open
5. ends in an open word class       -> keep open
6. terminal punctuation             -> close (semantic)
7. recognizer result stable         -> close (stability)
8. long trailing silence            -> close (silence)
9. otherwise                        -> keep open
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, Field

from parley.models.enums import ClosedBy


class ClosurePolicy(BaseModel):
    """Thresholds for utterance closure."""

    min_words: int = Field(default=5, ge=1)
    """Minimum word count before any closure rule may fire."""

    min_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    """Minimum mean recognizer confidence."""

    max_confidence_spread: float | None = Field(default=None, gt=0.0)
    """If set, keep the utterance open while the standard deviation of the
    fragment confidences exceeds this value."""

    silence_threshold_ms: int = Field(default=1500, ge=0)
    """Trailing silence that closes a long enough utterance."""

    silence_extra_words: int = Field(default=2, ge=0)
    """Words beyond ``min_words`` required for silence closure."""

    stable_repeat_threshold: int = Field(default=2, ge=1)
    """Consecutive identical final results that count as stable."""

    similarity_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    """Word-set similarity at which two final results count as the same."""


@dataclass
class ClosureDecision:
    """Decision from the closure policy."""

    should_close: bool
    """True if the utterance is complete."""

    closed_by: ClosedBy | None = None
    """Closure reason when ``should_close`` is True."""

    reason: str = ""
    """Human-readable reason for the decision."""


_FILLER_WORDS = frozenset(
    {
        "uh", "uhh", "um", "umm", "hmm", "hm", "ah", "er", "erm", "oh",
        "like", "so", "well", "okay", "ok", "yeah", "right", "mhm",
        "basically", "actually",
    }
)  # fmt: skip

_FILLER_PHRASES = [
    re.compile(r"^(uh+|um+|hmm+|ah+|er+|oh+)( (uh+|um+|hmm+|ah+|er+|oh+))*$"),
    re.compile(r"^(you know|i mean|basically|actually|honestly|literally)( what i mean)?$"),
    re.compile(
        r"^(ok(ay)? )?(so )?(let me (think|see)|give me a (second|moment|sec|minute))"
        r"( (about|on) (that|this|it))?( (for )?a (second|moment|sec|minute))?$"
    ),
    re.compile(
        r"^(that'?s (a|an) (good|great|interesting) (question|point)|good question|interesting)"
        r"( (let me think|actually|honestly))?$"
    ),
    re.compile(r"^(yeah|yes|okay|ok|sure|right)( (yeah|yes|okay|ok|sure|right|i see|got it))+$"),
]

_INCOMPLETE_PATTERNS = [
    re.compile(r"\b(and|but|or|so|because|since|when|if|that|which)$", re.IGNORECASE),
    re.compile(r"\b(the|a|an|to|for|with|in|on|at|by|from|of)$", re.IGNORECASE),
    re.compile(
        r"\b(is|are|was|were|have|has|had|do|does|did|will|would|could|should|can|may|might)$",
        re.IGNORECASE,
    ),
    re.compile(r",$"),
]

_TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")
_STRIP_PUNCTUATION = re.compile(r"[^\w\s']")


def count_words(text: str) -> int:
    return len(text.split())


def looks_like_filler(text: str) -> bool:
    """True if *text* is nothing but filler or acknowledgement."""
    normalized = " ".join(_STRIP_PUNCTUATION.sub(" ", text.lower()).split())
    if not normalized:
        return True
    if any(p.match(normalized) for p in _FILLER_PHRASES):
        return True
    return all(w in _FILLER_WORDS for w in normalized.split())


def looks_incomplete(text: str) -> bool:
    """True if *text* ends in a word class that expects more to follow."""
    trimmed = text.strip()
    return any(p.search(trimmed) for p in _INCOMPLETE_PATTERNS)


def evaluate_closure(
    text: str,
    *,
    confidence: float,
    trailing_silence_ms: float = 0.0,
    stable_count: int = 0,
    confidence_spread: float = 0.0,
    policy: ClosurePolicy | None = None,
) -> ClosureDecision:
    """Apply the closure rules to a final-fragment buffer."""
    policy = policy or ClosurePolicy()
    trimmed = text.strip()
    words = count_words(trimmed)

    if words < policy.min_words:
        return ClosureDecision(False, reason=f"too short ({words}/{policy.min_words} words)")

    if confidence < policy.min_confidence:
        return ClosureDecision(False, reason=f"low confidence ({confidence:.2f})")

    if (
        policy.max_confidence_spread is not None
        and confidence_spread > policy.max_confidence_spread
    ):
        return ClosureDecision(False, reason=f"unstable confidence ({confidence_spread:.2f})")

    if looks_like_filler(trimmed):
        return ClosureDecision(False, reason="filler detected")

    if looks_incomplete(trimmed):
        return ClosureDecision(False, reason="looks incomplete")

    if _TERMINAL_PUNCTUATION.search(trimmed):
        return ClosureDecision(True, ClosedBy.SEMANTIC, "sentence complete with punctuation")

    if stable_count >= policy.stable_repeat_threshold:
        return ClosureDecision(True, ClosedBy.STABILITY, f"stable final ({stable_count} repeats)")

    if (
        trailing_silence_ms >= policy.silence_threshold_ms
        and words >= policy.min_words + policy.silence_extra_words
    ):
        return ClosureDecision(
            True, ClosedBy.SILENCE, f"silence threshold ({int(trailing_silence_ms)}ms)"
        )

    return ClosureDecision(False, reason="waiting for more input")
