"""
Storage implementations.

Provides DurableStore implementations and the single-slot ranking store
built on top of them.

Available implementations:
- InMemoryStore: dict-backed store for tests and embedding
- JSONFileStore: every key kept in one JSON document on disk
- RankingStore: persists the latest tournament ranking with a TTL
"""

from .json_file_store import JSONFileStore
from .memory_store import InMemoryStore
from .ranking_store import RankingStore

__all__ = ["InMemoryStore", "JSONFileStore", "RankingStore"]
