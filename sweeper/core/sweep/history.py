"""
Sweep History Store

Keeps the most recent successful sweeps in a local JSON key-value file.
Persistence is best effort: read and write failures are logged and never
reach the sweep flow.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...config import settings
from .models import SweepHistoryEntry

SWEEP_HISTORY_KEY = "nexus-sweeper-history"


class JsonFileStorage:
    """String key-value storage backed by a single JSON object on disk."""

    def __init__(self, path: Union[str, Path], logger: Optional[logging.Logger] = None):
        self.path = Path(path).expanduser()
        self.logger = logger or logging.getLogger(__name__)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[Any]:
        try:
            return self._read_all().get(key)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to read {key} from {self.path}: {e}")
            return None

    def set_item(self, key: str, value: Any) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError) as e:
            self.logger.warning(f"Discarding unreadable storage file {self.path}: {e}")
            data = {}

        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except (OSError, TypeError) as e:
            self.logger.warning(f"Failed to write {key} to {self.path}: {e}")


class SweepHistoryStore:
    """
    Newest-first list of successful sweeps.

    - Unique by supertransaction hash (appending a known hash is a no-op)
    - Trimmed to ``max_entries`` on every write, dropping the oldest
    - Appends serialize through one lock
    """

    def __init__(
        self,
        storage: Optional[JsonFileStorage] = None,
        max_entries: Optional[int] = None,
        key: str = SWEEP_HISTORY_KEY,
        logger: Optional[logging.Logger] = None,
    ):
        self.storage = storage or JsonFileStorage(settings.history_storage_path)
        self.max_entries = max_entries or settings.max_history_entries
        self.key = key
        self.logger = logger or logging.getLogger(__name__)
        self._lock = asyncio.Lock()

    def _read(self) -> List[SweepHistoryEntry]:
        stored = self.storage.get_item(self.key)
        if not isinstance(stored, list):
            return []

        entries: List[SweepHistoryEntry] = []
        for item in stored:
            try:
                entries.append(SweepHistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Skipping malformed sweep history entry: {e}")
        return entries

    def _write(self, entries: List[SweepHistoryEntry]) -> None:
        trimmed = entries[:self.max_entries]
        self.storage.set_item(self.key, [entry.to_dict() for entry in trimmed])

    async def load(self) -> List[SweepHistoryEntry]:
        async with self._lock:
            return self._read()[:self.max_entries]

    async def append(self, entry: SweepHistoryEntry) -> List[SweepHistoryEntry]:
        async with self._lock:
            current = self._read()
            if any(existing.hash == entry.hash for existing in current):
                return current[:self.max_entries]

            updated = [entry, *current][:self.max_entries]
            self._write(updated)
            self.logger.info(
                f"Recorded sweep {entry.hash} ({entry.token_count} tokens, {entry.account_version.value})"
            )
            return updated
