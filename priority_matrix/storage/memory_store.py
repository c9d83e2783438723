"""
In-memory DurableStore.

Keeps values in a dict; nothing survives the process.
"""

from typing_extensions import override

from ..interfaces import DurableStore


class InMemoryStore(DurableStore):
    """Dict-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    @override
    def get(self, key: str) -> str | None:
        return self._data.get(key)

    @override
    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    @override
    def remove(self, key: str) -> None:
        _ = self._data.pop(key, None)
