"""HTTP server-sent-events generation source."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator

import httpx
from httpx_sse import aconnect_sse
from pydantic import BaseModel, Field

from parley.generation.base import GenerationError, GenerationRequest, GenerationSource

logger = logging.getLogger("parley.generation")

_DONE_SENTINEL = "[DONE]"


class HTTPGenerationConfig(BaseModel):
    """Configuration for :class:`HTTPGenerationSource`."""

    url: str
    """Full URL of the streaming endpoint (e.g. ``.../api/analyze-stream``)."""

    timeout: float = Field(default=30.0, gt=0.0)
    headers: dict[str, str] = Field(default_factory=dict)


class HTTPGenerationSource(GenerationSource):
    """POSTs a generation request as JSON and streams the SSE reply.

    Each event's ``data`` field carries a JSON object: ``{"chunk": "..."}`` for
    text, ``{"done": true}`` at the end and ``{"error": "..."}`` on
    failure.  Events whose data is not valid JSON are skipped.
    """

    def __init__(self, config: HTTPGenerationConfig) -> None:
        self._config = config
        self._client = httpx.AsyncClient(timeout=config.timeout)

    @property
    def name(self) -> str:
        return "http"

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        headers = {"Content-Type": "application/json", **self._config.headers}
        try:
            async with aconnect_sse(
                self._client,
                "POST",
                self._config.url,
                json=request.to_payload(),
                headers=headers,
            ) as event_source:
                response = event_source.response
                if response.status_code >= 400:
                    await response.aread()
                    raise self._status_error(response)
                async for sse in event_source.aiter_sse():
                    if not sse.data:
                        continue
                    if sse.data.strip() == _DONE_SENTINEL:
                        return
                    try:
                        data = json.loads(sse.data)
                    except json.JSONDecodeError:
                        logger.debug("Skipping malformed SSE payload: %r", sse.data[:80])
                        continue
                    if not isinstance(data, dict):
                        continue
                    if data.get("error"):
                        raise GenerationError(
                            str(data["error"]), source=self.name, status_code=response.status_code
                        )
                    chunk = data.get("chunk")
                    if chunk:
                        yield str(chunk)
                    if data.get("done"):
                        return
        except httpx.TimeoutException as exc:
            raise GenerationError(
                f"Request timed out: {exc}", retryable=True, source=self.name
            ) from exc
        except httpx.HTTPError as exc:
            raise GenerationError(str(exc), retryable=True, source=self.name) from exc

    def _status_error(self, response: httpx.Response) -> GenerationError:
        message = f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            message = f"{message}: {body['error']}"
        logger.warning("Generation request failed: %s", message)
        return GenerationError(
            message,
            retryable=response.status_code >= 500,
            source=self.name,
            status_code=response.status_code,
        )

    async def close(self) -> None:
        await self._client.aclose()
