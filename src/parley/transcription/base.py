"""Transcription source boundary: fragment events and provider ABC."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime

from parley.models.conversation import _utcnow


@dataclass(frozen=True)
class TranscriptFragment:
    """One recognizer result.

    Interim fragments (``is_final=False``) are display-only.  Final
    fragments carry monotonically appended text for the current utterance.
    """

    text: str
    """Recognized text of this fragment."""

    is_final: bool = False
    """Whether the recognizer committed this text."""

    confidence: float = 1.0
    """Recognizer confidence (0.0 to 1.0)."""

    trailing_silence_ms: int = 0
    """Silence observed after this fragment, in milliseconds."""

    stable_repeat_count: int = 0
    """How many consecutive times the recognizer reported this final result."""


@dataclass(frozen=True)
class SpeechStarted:
    """The recognizer detected the start of speech."""

    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SpeechEnded:
    """The recognizer detected the end of speech."""

    timestamp: datetime = field(default_factory=_utcnow)


TranscriptionEvent = TranscriptFragment | SpeechStarted | SpeechEnded


class TranscriptionSource(ABC):
    """Speech recognizer feeding the conversation engine."""

    @property
    def name(self) -> str:
        """Source name (e.g. 'deepgram', 'whisper')."""
        return self.__class__.__name__

    @abstractmethod
    def events(self) -> AsyncIterator[TranscriptionEvent]:
        """Yield fragments and speech boundary signals in arrival order."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses if needed."""
