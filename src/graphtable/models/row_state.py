"""Snapshot of what a single row should display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PySide6.QtGui import QImage

from .record_store import Record


@dataclass(frozen=True, slots=True)
class RowViewState:
    """Visual state for one (section, row) slot.

    ``loading`` is only set on the paging sentinel; such rows carry no record,
    text or picture.
    """

    record: Optional[Record] = None
    title: str = ""
    subtitle: str = ""
    picture: Optional[QImage] = None
    selected: bool = False
    loading: bool = False

    @classmethod
    def empty(cls) -> "RowViewState":
        return cls()

    @classmethod
    def activity(cls) -> "RowViewState":
        return cls(loading=True)


__all__ = ["RowViewState"]
