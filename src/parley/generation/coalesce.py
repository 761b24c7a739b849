"""Stream-flush coalescing for generated text.

Token streams from language models arrive in tiny pieces.  The coalescer
batches them so consumers see fewer, larger chunks without adding
noticeable latency.
"""

from __future__ import annotations

import re
import time
from collections.abc import AsyncIterator, Callable

from pydantic import BaseModel, Field

_BOUNDARY_RE = re.compile(r"[.!?\n]")


class StreamFlushPolicy(BaseModel):
    """When to release buffered tokens."""

    flush_chars: int = Field(default=8, ge=1)
    """Flush once the buffer holds at least this many characters."""

    flush_interval_ms: float = Field(default=50.0, ge=0.0)
    """Flush if this long has passed since the previous flush."""


class StreamCoalescer:
    """Incremental coalescer: :meth:`feed` tokens, :meth:`flush` at the end."""

    def __init__(
        self,
        policy: StreamFlushPolicy | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._policy = policy or StreamFlushPolicy()
        self._clock = clock
        self._buf = ""
        self._last_flush = clock()

    def feed(self, token: str) -> str:
        """Add one token. Returns the text to release now (may be empty)."""
        if not token:
            return ""
        self._buf += token
        now = self._clock()
        elapsed_ms = (now - self._last_flush) * 1000.0
        if (
            len(self._buf) >= self._policy.flush_chars
            or elapsed_ms >= self._policy.flush_interval_ms
            or _BOUNDARY_RE.search(token)
        ):
            self._last_flush = now
            return self.flush()
        return ""

    def flush(self) -> str:
        """Release whatever is buffered."""
        out, self._buf = self._buf, ""
        return out

    def reset(self) -> None:
        self._buf = ""
        self._last_flush = self._clock()


async def coalesce_stream(
    stream: AsyncIterator[str],
    policy: StreamFlushPolicy | None = None,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> AsyncIterator[str]:
    """Re-chunk *stream* according to *policy*.

    The remainder is flushed at the end of the stream, and also before an
    error from *stream* is re-raised so no accepted text is lost.
    """
    coalescer = StreamCoalescer(policy, clock=clock)
    try:
        async for token in stream:
            out = coalescer.feed(token)
            if out:
                yield out
    except Exception:
        rest = coalescer.flush()
        if rest:
            yield rest
        raise
    rest = coalescer.flush()
    if rest:
        yield rest
