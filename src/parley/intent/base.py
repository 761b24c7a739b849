"""Intent classifier ABC and trigger predicates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from parley.models.enums import Intent

TRIGGER_INTENTS = frozenset({Intent.QUESTION, Intent.EXPLAIN, Intent.CLARIFY})
"""Intents that warrant a generated response."""

CONTINUE_INTENTS = frozenset({Intent.CONTINUE})
"""Intents meaning the speaker is mid-thought."""

_REASONS: dict[Intent, str] = {
    Intent.FILLER: "detected as filler/noise",
    Intent.THINKING: "user is thinking out loud",
    Intent.ACKNOWLEDGE: "simple acknowledgment",
    Intent.CONTINUE: "user is mid-thought, continue listening",
    Intent.STATEMENT: "declarative statement, not a question",
    Intent.QUESTION: "detected as question",
    Intent.EXPLAIN: "request for explanation",
    Intent.CLARIFY: "clarification request",
    Intent.UNKNOWN: "could not classify intent",
}


def should_trigger(intent: Intent) -> bool:
    """True if *intent* should start a generation."""
    return intent in TRIGGER_INTENTS


def should_continue(intent: Intent) -> bool:
    """True if *intent* means the speaker has not finished yet."""
    return intent in CONTINUE_INTENTS


def describe_intent(intent: Intent) -> str:
    return _REASONS[intent]


@dataclass(frozen=True)
class IntentResult:
    """One classification with its gating consequences."""

    intent: Intent
    should_trigger: bool
    should_continue: bool
    reason: str = ""

    @classmethod
    def for_intent(cls, intent: Intent, reason: str | None = None) -> IntentResult:
        return cls(
            intent=intent,
            should_trigger=should_trigger(intent),
            should_continue=should_continue(intent),
            reason=reason or describe_intent(intent),
        )


class IntentClassifier(ABC):
    """Maps utterance text to an :class:`Intent`.

    Implementations must be deterministic and side-effect free so the
    orchestrator can call them inline.
    """

    @property
    def name(self) -> str:
        """Classifier name (e.g. 'patterns', 'llm')."""
        return self.__class__.__name__

    @abstractmethod
    def classify(self, text: str) -> Intent:
        """Classify *text*.

        Args:
            text: Closed utterance text.

        Returns:
            The intent category.
        """
        ...

    def describe(self, text: str) -> IntentResult:
        """Classify *text* and report the gating decision."""
        return IntentResult.for_intent(self.classify(text))
