"""Generation source boundary: request model, ABC and errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from parley.models.conversation import Turn


class GenerationError(Exception):
    """Error from a generation source.

    Attributes:
        retryable: Whether the caller could retry the request.
        source: Name of the generation source that raised the error.
        status_code: HTTP status code from the backend, if available.
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        source: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.source = source
        self.status_code = status_code


class GenerationTimeoutError(GenerationError):
    """The generation did not finish within the allowed time."""

    def __init__(self, timeout_s: float, *, source: str = "") -> None:
        super().__init__(
            f"Generation timed out after {timeout_s:g}s",
            retryable=True,
            source=source,
        )
        self.timeout_s = timeout_s


class GenerationRequest(BaseModel):
    """Everything a generation source needs for one streamed response."""

    model_config = ConfigDict(frozen=True)

    generation_id: int
    text: str
    turns: list[Turn] = Field(default_factory=list)
    language: str = "en"
    profile: dict[str, Any] = Field(default_factory=dict)
    format_mode: str = "default"
    model: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the ``analyze-stream`` endpoint."""
        transcripts = [{"speaker": t.speaker.value, "text": t.content} for t in self.turns]
        if not transcripts or transcripts[-1]["text"] != self.text:
            transcripts.append({"speaker": "user", "text": self.text})
        payload: dict[str, Any] = {
            "transcripts": transcripts,
            "language": self.language,
            "interviewContext": self.profile,
            "simpleEnglish": self.format_mode == "simple",
            "generationId": self.generation_id,
        }
        if self.model:
            payload["aiModel"] = self.model
        return payload


class GenerationSource(ABC):
    """Streams generated text for a request."""

    @property
    def name(self) -> str:
        """Source name (e.g. 'http', 'mock')."""
        return self.__class__.__name__

    @property
    def supports_cancellation(self) -> bool:
        """Whether cancelling the consuming task stops the backend call.

        Sources that return False are left to drain after an interruption;
        their remaining chunks are discarded by the caller.
        """
        return True

    @abstractmethod
    def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        """Yield text chunks for *request*.

        The iterator finishes when the response is complete and raises
        :class:`GenerationError` on failure.
        """
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses that hold connections."""
