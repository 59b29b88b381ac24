"""Optional strategy hooks consulted by :class:`GraphTableModel`.

Every hook may be left as ``None``; the defaults are to include every record,
show empty titles, show no subtitle, fetch no picture and select nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .index_builder import RecordFilter
from .record_store import Record

TextProvider = Callable[[Record], Optional[str]]
SelectionPredicate = Callable[[Record], bool]


@dataclass(slots=True)
class TableDelegate:
    """Per-record policy for filtering and display text."""

    filter_includes: Optional[RecordFilter] = None
    title_of: Optional[TextProvider] = None
    subtitle_of: Optional[TextProvider] = None
    picture_url_of: Optional[TextProvider] = None

    def includes(self, record: Record) -> bool:
        if self.filter_includes is None:
            return True
        return bool(self.filter_includes(record))

    def title(self, record: Record) -> str:
        if self.title_of is None:
            return ""
        return self.title_of(record) or ""

    def subtitle(self, record: Record) -> str:
        if self.subtitle_of is None:
            return ""
        return self.subtitle_of(record) or ""

    def picture_url(self, record: Record) -> Optional[str]:
        if self.picture_url_of is None:
            return None
        return self.picture_url_of(record) or None


@dataclass(slots=True)
class SelectionDelegate:
    """Decide which records render with a check mark."""

    includes_record: Optional[SelectionPredicate] = None

    def is_selected(self, record: Record) -> bool:
        if self.includes_record is None:
            return False
        return bool(self.includes_record(record))


def field_text(field_name: str) -> TextProvider:
    """Return a provider reading *field_name* as display text."""

    def provider(record: Record) -> Optional[str]:
        value = record.get(field_name)
        if value is None:
            return None
        return str(value)

    return provider


__all__ = [
    "SelectionDelegate",
    "SelectionPredicate",
    "TableDelegate",
    "TextProvider",
    "field_text",
]
