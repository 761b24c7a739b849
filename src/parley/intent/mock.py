"""Mock intent classifier for testing."""

from __future__ import annotations

from parley.intent.base import IntentClassifier
from parley.models.enums import Intent


class MockIntentClassifier(IntentClassifier):
    """Returns a preconfigured sequence of intents, then *default*."""

    def __init__(
        self,
        intents: list[Intent] | None = None,
        *,
        default: Intent = Intent.QUESTION,
    ) -> None:
        self._intents = intents or []
        self._index = 0
        self._default = default
        self.texts: list[str] = []

    @property
    def name(self) -> str:
        return "MockIntentClassifier"

    def classify(self, text: str) -> Intent:
        self.texts.append(text)
        if self._index < len(self._intents):
            intent = self._intents[self._index]
            self._index += 1
            return intent
        return self._default
