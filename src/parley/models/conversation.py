"""Conversation data models: utterances, turns and state transitions."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from parley.models.enums import ClosedBy, ConversationEvent, ConversationState, Speaker


def _utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class Utterance(BaseModel):
    """A closed span of recognized speech attributed to one speaker.

    Created once by the utterance builder when a closure rule fires and
    never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"utt-{uuid4().hex[:12]}")
    speaker: Speaker = Speaker.USER
    text: str
    start_time: datetime = Field(default_factory=_utcnow)
    end_time: datetime = Field(default_factory=_utcnow)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    closed_by: ClosedBy = ClosedBy.SILENCE

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def duration_ms(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() * 1000)


class Turn(BaseModel):
    """A committed exchange unit (user or AI) in conversation history."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_utterance(cls, utterance: Utterance) -> Turn:
        return cls(
            speaker=utterance.speaker,
            content=utterance.text,
            timestamp=utterance.end_time,
        )


class StateTransition(BaseModel):
    """Audit record for one successful state machine dispatch."""

    model_config = ConfigDict(frozen=True)

    from_state: ConversationState
    event: ConversationEvent
    to_state: ConversationState
    generation_id: int = 0
    timestamp: datetime = Field(default_factory=_utcnow)
