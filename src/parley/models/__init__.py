"""Data models for parley."""

from parley.models.conversation import StateTransition, Turn, Utterance
from parley.models.enums import (
    ClosedBy,
    ConversationEvent,
    ConversationState,
    Intent,
    Speaker,
)

__all__ = [
    "ClosedBy",
    "ConversationEvent",
    "ConversationState",
    "Intent",
    "Speaker",
    "StateTransition",
    "Turn",
    "Utterance",
]
