"""Data exchanged with the extraction service.

The service returns an extraction result (summary plus key points) for
a submitted URL, and pages of previously stored extractions. These
helpers load both from decoded JSON and convert them to list rows.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Optional

from . import pagination
from .errors import PersistenceError, ValidationError
from .model import Row
from .textmatch import row_matches

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    summary: str = ""
    key_points: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ExtractionResult":
        if not isinstance(data, dict):
            raise ValidationError("Extraction result must be a JSON object")
        summary = data.get("summary") or ""
        points = data.get("keyPoints", data.get("key_points")) or []
        if not isinstance(summary, str):
            raise ValidationError("'summary' must be a string")
        if not isinstance(points, list) or not all(isinstance(p, str) for p in points):
            raise ValidationError("'keyPoints' must be a list of strings")
        return cls(summary=summary, key_points=list(points))

    def paragraphs(self) -> list[str]:
        """Summary split into paragraphs on blank lines and single newlines."""
        return re.split(r"\n\n|\n", self.summary) if self.summary else []


@dataclass
class HistoryEntry:
    id: int
    url: str = ""
    content: str = ""
    summary: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryEntry":
        if not isinstance(data, dict) or "id" not in data:
            raise ValidationError("History entry must be an object with an 'id'")
        try:
            entry_id = int(data["id"])
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid history entry id: {data['id']!r}")
        return cls(
            id=entry_id,
            url=data.get("url") or "",
            content=data.get("content") or "",
            summary=data.get("summary") or "",
        )

    def to_row(self) -> Row:
        return Row(self.id, {"url": self.url, "content": self.content,
                             "summary": self.summary})

    @classmethod
    def from_row(cls, row: Row) -> "HistoryEntry":
        return cls(id=row.id, url=row.fields.get("url", ""),
                   content=row.fields.get("content", ""),
                   summary=row.fields.get("summary", ""))


@dataclass
class HistoryPage:
    content: list[HistoryEntry]
    page: int = 0
    total_pages: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryPage":
        # A bare list is accepted as a single page holding everything.
        if isinstance(data, list):
            entries = [HistoryEntry.from_dict(item) for item in data]
            return cls(content=entries, page=0, total_pages=1 if entries else 0)
        if not isinstance(data, dict):
            raise ValidationError("History page must be a JSON object or list")
        items = data.get("content") or []
        if not isinstance(items, list):
            raise ValidationError("'content' must be a list")
        return cls(
            content=[HistoryEntry.from_dict(item) for item in items],
            page=int(data.get("page") or 0),
            total_pages=int(data.get("totalPages") or 0),
        )

    def rows(self) -> list[Row]:
        return [entry.to_row() for entry in self.content]


class HistoryStore:
    """Stored extractions served page by page, as the service serves them.

    Pages are 0-based and list the newest id first. A search term keeps
    entries whose url or content contains it, ignoring case. When the
    store was loaded from a file, updates and deletes are written back
    to it atomically before they take effect in memory.
    """

    SEARCH_FIELDS = ("url", "content")

    def __init__(self, entries: Iterable[HistoryEntry] = (), path: Optional[Path] = None):
        self._entries = {entry.id: entry for entry in entries}
        self.path = path

    @classmethod
    def from_file(cls, path: str) -> "HistoryStore":
        page = HistoryPage.from_dict(load_json_file(path))
        return cls(page.content, path=Path(path))

    @property
    def entries(self) -> list[HistoryEntry]:
        return sorted(self._entries.values(), key=lambda entry: entry.id, reverse=True)

    def fetch_page(self, page: int, size: int, search: str = "") -> HistoryPage:
        matching = [
            entry for entry in self.entries
            if row_matches({"url": entry.url, "content": entry.content},
                           self.SEARCH_FIELDS, search)
        ]
        return HistoryPage(
            content=pagination.page_slice(matching, page, size),
            page=page,
            total_pages=pagination.page_count(len(matching), size),
        )

    def update(self, entry_id: int, fields: dict[str, str]) -> bool:
        """Replace the url and content of an entry; False if it is unknown."""
        entry = self._entries.get(entry_id)
        if entry is None:
            return False
        updated = dict(self._entries)
        updated[entry_id] = replace(entry,
                                    url=fields.get("url", entry.url),
                                    content=fields.get("content", entry.content))
        self._commit(updated)
        return True

    def delete(self, entry_id: int) -> bool:
        if entry_id not in self._entries:
            return False
        remaining = {key: entry for key, entry in self._entries.items() if key != entry_id}
        self._commit(remaining)
        return True

    def _commit(self, entries: dict[int, HistoryEntry]) -> None:
        if self.path is not None:
            self._write(sorted(entries.values(), key=lambda entry: entry.id))
        self._entries = entries

    def _write(self, entries: list[HistoryEntry]) -> None:
        """Write entries atomically (temp file + rename)."""
        temp_file = self.path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump([asdict(entry) for entry in entries], f, indent=2)
            temp_file.replace(self.path)
        except OSError as e:
            logger.warning(f"Could not save history to {self.path}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            raise PersistenceError(f"Could not save history: {e}")


def key_point_rows(points: Iterable[str]) -> list[Row]:
    """Number key points from 1 in list order."""
    return [Row(i, {"text": text}) for i, text in enumerate(points, 1)]


def key_points_from_rows(rows: Iterable[Row]) -> list[str]:
    return [row.text for row in rows]


def load_json_file(path: str) -> Any:
    """Read and decode a JSON file, reporting syntax errors as ValidationError."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path} is not valid JSON: {e}")
