"""Generation sources and stream helpers."""

from parley.generation.base import (
    GenerationError,
    GenerationRequest,
    GenerationSource,
    GenerationTimeoutError,
)
from parley.generation.coalesce import StreamCoalescer, StreamFlushPolicy, coalesce_stream
from parley.generation.http import HTTPGenerationConfig, HTTPGenerationSource
from parley.generation.mock import MockGenerationSource

__all__ = [
    "GenerationError",
    "GenerationRequest",
    "GenerationSource",
    "GenerationTimeoutError",
    "HTTPGenerationConfig",
    "HTTPGenerationSource",
    "MockGenerationSource",
    "StreamCoalescer",
    "StreamFlushPolicy",
    "coalesce_stream",
]
