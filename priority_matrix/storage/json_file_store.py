"""
JSON file storage implementation.

Persists every key of the DurableStore in a single JSON document.
Writes go to a temporary sibling file that replaces the original, so a crash
mid-write never leaves a truncated document behind.
"""

import json
import os
import typing
from pathlib import Path

from typing_extensions import override

from ..interfaces import DurableStore
from ..logging_config import get_logger

# Module-level logger
logger = get_logger("json_file_store")


class JSONFileStore(DurableStore):
    """
    File-backed key-value store.

    Values are opaque strings; the file maps key -> value.
    """

    path: Path

    def __init__(self, path: Path):
        """
        Initialize JSON file storage.

        Args:
            path: Location of the JSON document (created on first write)
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"JSON file store initialized: path={self.path}")

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = typing.cast(object, json.load(f))
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt store file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self.path}: top level is not an object")
            return {}

        return {
            str(key): value
            for key, value in typing.cast(dict[object, object], data).items()
            if isinstance(value, str)
        }

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    @override
    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    @override
    def set(self, key: str, value: str) -> None:
        logger.debug(f"Writing key {key} ({len(value)} chars) to {self.path}")
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    @override
    def remove(self, key: str) -> None:
        data = self._read_all()
        if key not in data:
            return
        del data[key]
        self._write_all(data)
        logger.debug(f"Removed key {key} from {self.path}")
