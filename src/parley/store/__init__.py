"""Session state storage."""

from parley.store.base import SessionSnapshot, SessionStore, StreamingBuffer
from parley.store.memory import InMemorySessionStore

__all__ = [
    "InMemorySessionStore",
    "SessionSnapshot",
    "SessionStore",
    "StreamingBuffer",
]
