"""Intent classification gating generation."""

from parley.intent.base import (
    CONTINUE_INTENTS,
    TRIGGER_INTENTS,
    IntentClassifier,
    IntentResult,
    should_continue,
    should_trigger,
)
from parley.intent.mock import MockIntentClassifier
from parley.intent.patterns import (
    DEFAULT_RULES,
    IntentInput,
    IntentRule,
    PatternIntentClassifier,
    classify_intent,
)

__all__ = [
    "CONTINUE_INTENTS",
    "DEFAULT_RULES",
    "TRIGGER_INTENTS",
    "IntentClassifier",
    "IntentInput",
    "IntentResult",
    "IntentRule",
    "MockIntentClassifier",
    "PatternIntentClassifier",
    "classify_intent",
    "should_continue",
    "should_trigger",
]
