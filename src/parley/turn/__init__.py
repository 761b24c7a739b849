"""Utterance segmentation: closure policy and builder."""

from parley.turn.builder import UtteranceBuilder, UtteranceCallback
from parley.turn.policy import (
    ClosureDecision,
    ClosurePolicy,
    evaluate_closure,
    looks_incomplete,
    looks_like_filler,
)
from parley.turn.similarity import confidence_spread, text_similarity

__all__ = [
    "ClosureDecision",
    "ClosurePolicy",
    "UtteranceBuilder",
    "UtteranceCallback",
    "confidence_spread",
    "evaluate_closure",
    "looks_incomplete",
    "looks_like_filler",
    "text_similarity",
]
