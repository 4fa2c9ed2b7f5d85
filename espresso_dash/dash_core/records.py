"""
Best Record Store
=================

Durable key -> integer storage for the best score and best distance.

Stores never raise for ordinary failures: ``get`` returns None when a value
is absent or unreadable and ``set`` returns False when it could not persist.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

_logger = logging.getLogger(__name__)


class BestRecordStore(Protocol):
    """Interface for best-record persistence."""

    def get(self, key: str) -> Optional[int]:
        """Stored integer for key, or None if absent."""
        ...

    def set(self, key: str, value: int) -> bool:
        """Persist value under key. Returns False on failure."""
        ...


@dataclass(frozen=True)
class BestRecord:
    """Best score and distance as read from a store."""
    best_score: int
    best_distance: int


class InMemoryRecordStore:
    """Process-local store, used when nothing should be persisted."""

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._values: Dict[str, int] = dict(initial or {})

    def get(self, key: str) -> Optional[int]:
        return self._values.get(key)

    def set(self, key: str, value: int) -> bool:
        self._values[key] = int(value)
        return True


class JsonFileRecordStore:
    """
    Store backed by a small JSON object on disk.

    A missing file reads as empty. A corrupt file also reads as empty and is
    replaced on the next successful write.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize store.

        Args:
            path: JSON file location. ``~`` is expanded.
        """
        self._path = Path(os.path.expanduser(str(path)))

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, int]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _logger.warning("Could not read best records from %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Ignoring malformed best records in %s", self._path)
            return {}
        return data

    def get(self, key: str) -> Optional[int]:
        value = self._read_all().get(key)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            _logger.warning("Ignoring non-integer best record %r for %s", value, key)
            return None

    def set(self, key: str, value: int) -> bool:
        data = self._read_all()
        data[key] = int(value)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            _logger.warning("Could not write best records to %s: %s", self._path, e)
            return False
        return True
