"""All string enums for parley."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class Speaker(StrEnum):
    USER = "user"
    AI = "ai"


@unique
class ClosedBy(StrEnum):
    """Why the utterance builder closed an utterance."""

    SILENCE = "silence"
    SEMANTIC = "semantic"
    STABILITY = "stability"
    INTERRUPTION = "interruption"


@unique
class ConversationState(StrEnum):
    IDLE = "IDLE"
    LISTENING = "LISTENING"
    USER_SPEAKING = "USER_SPEAKING"
    AI_THINKING = "AI_THINKING"
    AI_RESPONDING = "AI_RESPONDING"
    INTERRUPTED = "INTERRUPTED"


@unique
class ConversationEvent(StrEnum):
    START_INTERVIEW = "START_INTERVIEW"
    STOP_INTERVIEW = "STOP_INTERVIEW"
    SPEECH_START = "SPEECH_START"
    SPEECH_END = "SPEECH_END"
    UTTERANCE_COMPLETE = "UTTERANCE_COMPLETE"
    ANALYSIS_START = "ANALYSIS_START"
    ANALYSIS_CHUNK = "ANALYSIS_CHUNK"
    ANALYSIS_COMPLETE = "ANALYSIS_COMPLETE"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"
    USER_INTERRUPT = "USER_INTERRUPT"
    RESET = "RESET"


@unique
class Intent(StrEnum):
    """Communicative purpose of an utterance."""

    FILLER = "filler"
    THINKING = "thinking"
    ACKNOWLEDGE = "acknowledge"
    CLARIFY = "clarify"
    QUESTION = "question"
    EXPLAIN = "explain"
    STATEMENT = "statement"
    CONTINUE = "continue"
    UNKNOWN = "unknown"
