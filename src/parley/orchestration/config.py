"""Orchestrator configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from parley.generation.coalesce import StreamFlushPolicy
from parley.turn.policy import ClosurePolicy


class GenerationSettings(BaseModel):
    """Per-session values copied into every generation request."""

    language: str = "en-US"
    """Recognizer locale; only the base language code is sent."""

    profile: dict[str, Any] = Field(default_factory=dict)
    """Free-form context about the speaker (role, resume summary, ...)."""

    format_mode: str = "default"
    model: str | None = "gpt-4o-mini"

    @property
    def base_language(self) -> str:
        return self.language.split("-")[0]


class OrchestratorConfig(BaseModel):
    """Tuning knobs for :class:`~parley.orchestration.engine.StreamingOrchestrator`."""

    settle_delay_ms: float = Field(default=50.0, ge=0.0)
    """Delay between a triggering utterance and the start of analysis."""

    history_turns: int = Field(default=6, ge=0)
    """Number of recent turns sent with each request."""

    generation_timeout_s: float = Field(default=30.0, gt=0.0)
    """Maximum wait for a generation to finish."""

    flush: StreamFlushPolicy | None = None
    """Coalesce generated tokens before they reach the store."""

    closure: ClosurePolicy = Field(default_factory=ClosurePolicy)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
