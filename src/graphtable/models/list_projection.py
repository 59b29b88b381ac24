"""Read-only (section, row) view over the current section index.

This module answers the questions a sectioned list view asks: how many
sections, how many rows per section, which record sits at a location and,
inversely, where a record currently lives.  Every answer is derived on demand
from the index and paging state supplied through callbacks, so the projection
never holds stale copies of either.
"""
from __future__ import annotations

from typing import Callable, NamedTuple, Optional, Tuple

from .index_builder import GroupKeyFn, SectionIndex
from .record_store import Record


class RowLocation(NamedTuple):
    """Position of a row inside the sectioned list."""

    section: int
    row: int


class ListProjection:
    """Map the section index onto (section, row) coordinates.

    The last section grows one synthetic row, the paging sentinel, while more
    data is expected and someone is registered to load it.  Out-of-range
    lookups return ``None`` (or ``0`` for counts) instead of raising.
    """

    def __init__(
        self,
        get_index: Callable[[], SectionIndex],
        get_expecting_more: Callable[[], bool],
        get_paging_enabled: Callable[[], bool],
        get_group_key_fn: Callable[[], GroupKeyFn],
    ):
        """Initialize the projection.

        Args:
            get_index: Callback returning the current section index.
            get_expecting_more: Callback returning the store's paging flag.
            get_paging_enabled: Callback returning whether a data-needed
                callback is registered.
            get_group_key_fn: Callback returning the grouping function the
                index was built with.
        """
        self._get_index = get_index
        self._get_expecting_more = get_expecting_more
        self._get_paging_enabled = get_paging_enabled
        self._get_group_key_fn = get_group_key_fn

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------
    def section_count(self) -> int:
        return len(self._get_index())

    def section_titles(self) -> Tuple[str, ...]:
        return self._get_index().keys

    def section_title(self, section: int) -> Optional[str]:
        return self._get_index().key_at(section)

    def is_last_section(self, section: int) -> bool:
        count = self.section_count()
        return count > 0 and section == count - 1

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------
    def shows_paging_sentinel(self) -> bool:
        """Return ``True`` when the last section carries the sentinel row."""
        return bool(self._get_expecting_more() and self._get_paging_enabled())

    def record_count(self, section: int) -> int:
        """Return the number of real records in *section*, without the sentinel."""
        return len(self._get_index().records_in(section))

    def row_count(self, section: int) -> int:
        index = self._get_index()
        if not 0 <= section < len(index):
            return 0
        count = len(index.records_in(section))
        if self.shows_paging_sentinel() and self.is_last_section(section):
            count += 1
        return count

    def record_at(self, section: int, row: int) -> Optional[Record]:
        records = self._get_index().records_in(section)
        if 0 <= row < len(records):
            return records[row]
        return None

    def is_paging_sentinel(self, section: int, row: int) -> bool:
        if not self.shows_paging_sentinel() or not self.is_last_section(section):
            return False
        return row == self.record_count(section)

    def location_of(self, record: Record) -> Optional[RowLocation]:
        """Return where *record* currently lives, comparing by identity.

        ``None`` means the record's key is not in the index or the record
        itself was filtered out or arrived after the last rebuild.
        """
        index = self._get_index()
        key = self._get_group_key_fn()(record)
        section = index.section_of_key(key)
        if section is None:
            return None
        for row, candidate in enumerate(index.sections.get(key, ())):
            if candidate is record:
                return RowLocation(section, row)
        return None


__all__ = ["ListProjection", "RowLocation"]
