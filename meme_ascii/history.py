"""
Generation History

Bounded, newest-first record of conversions and enhancements. Lives in
memory; can be saved to and restored from a JSON file.
"""

import json
import logging
import os
import shutil
import tempfile
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .config import DEFAULT_MAX_HISTORY, ConversionOptions
from .errors import HistoryEntryNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """
    One saved result.

    Attributes:
        id: Unique entry id
        timestamp: Creation time, milliseconds since the epoch
        image_ref: data: URL of the source image
        ascii_art: Resulting art
        options: Options used to produce it
    """
    id: str
    timestamp: int
    image_ref: str
    ascii_art: str
    options: ConversionOptions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "image_ref": self.image_ref,
            "ascii_art": self.ascii_art,
            "options": self.options.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            image_ref=str(data["image_ref"]),
            ascii_art=str(data["ascii_art"]),
            options=ConversionOptions.from_dict(data.get("options")),
        )

    @property
    def preview(self) -> str:
        """First line of the art, for list displays."""
        return self.ascii_art.split("\n", 1)[0]


class AsciiHistory:
    """Newest-first collection capped at max_items; the oldest entry is evicted on overflow."""

    def __init__(self, max_items: int = DEFAULT_MAX_HISTORY, entries: Optional[List[HistoryEntry]] = None):
        if max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {max_items}")
        self.max_items = max_items
        self._entries: List[HistoryEntry] = list(entries or [])[:max_items]

    def add(self, ascii_art: str, options: ConversionOptions, image_ref: str) -> HistoryEntry:
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            timestamp=int(time.time() * 1000),
            image_ref=image_ref,
            ascii_art=ascii_art,
            options=options,
        )
        self._entries.insert(0, entry)
        if len(self._entries) > self.max_items:
            evicted = self._entries[self.max_items:]
            del self._entries[self.max_items:]
            logger.debug("History full, evicted %d entries", len(evicted))
        return entry

    def get(self, entry_id: str) -> HistoryEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise HistoryEntryNotFoundError(f"No history entry with id '{entry_id}'")

    def delete(self, entry_id: str) -> bool:
        """Remove an entry; returns False if it was not present."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        return len(self._entries) < before

    def clear(self) -> None:
        self._entries = []

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __contains__(self, entry_id: object) -> bool:
        return any(e.id == entry_id for e in self._entries)

    # --- Persistence

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]

    @classmethod
    def from_list(cls, items: List[Dict[str, Any]], max_items: int = DEFAULT_MAX_HISTORY) -> "AsciiHistory":
        return cls(max_items=max_items, entries=[HistoryEntry.from_dict(d) for d in items])

    def save(self, path: str) -> None:
        """Write the history to a JSON file atomically."""
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".tmp_history_", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"max_items": self.max_items, "entries": self.to_list()}, f, indent=2)
                f.write("\n")
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        logger.debug("Saved %d history entries to %s", len(self), path)

    @classmethod
    def load(cls, path: str, max_items: int = DEFAULT_MAX_HISTORY) -> "AsciiHistory":
        """
        Read a history file.

        A missing file yields an empty history. A corrupt file is copied to
        <path>.corrupt.bak and an empty history is returned.
        """
        if not os.path.exists(path):
            return cls(max_items=max_items)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            items = data["entries"] if isinstance(data, dict) else data
            return cls.from_list(items, max_items=max_items)
        except (OSError, ValueError, KeyError, TypeError) as e:
            backup = path + ".corrupt.bak"
            logger.warning("History file %s unreadable (%s); backing up to %s", path, e, backup)
            shutil.copyfile(path, backup)
            return cls(max_items=max_items)
