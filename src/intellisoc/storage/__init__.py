"""Storage layer - durable collections."""

from intellisoc.storage.store import DurableStore, JsonFileStore
from intellisoc.storage.collections import RecordCollection, next_sequence

__all__ = [
    "DurableStore",
    "JsonFileStore",
    "RecordCollection",
    "next_sequence",
]
