"""Transcription source boundary."""

from parley.transcription.base import (
    SpeechEnded,
    SpeechStarted,
    TranscriptFragment,
    TranscriptionEvent,
    TranscriptionSource,
)
from parley.transcription.mock import MockTranscriptionSource

__all__ = [
    "MockTranscriptionSource",
    "SpeechEnded",
    "SpeechStarted",
    "TranscriptFragment",
    "TranscriptionEvent",
    "TranscriptionSource",
]
