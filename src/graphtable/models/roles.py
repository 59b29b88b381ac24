"""Role definitions exposed by :class:`GraphTableModel`."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict

from PySide6.QtCore import Qt


class Roles(IntEnum):
    """Custom roles exposed to QML or widgets."""

    RECORD = Qt.UserRole + 1
    SUBTITLE = Qt.UserRole + 2
    IS_SECTION = Qt.UserRole + 3
    IS_LOADING = Qt.UserRole + 4
    IS_SELECTED = Qt.UserRole + 5
    SECTION_KEY = Qt.UserRole + 6


def role_names(base: Dict[int, bytes] | None = None) -> Dict[int, bytes]:
    """Return a mapping of Qt role numbers to byte names."""

    mapping: Dict[int, bytes] = {} if base is None else dict(base)
    mapping.update(
        {
            Roles.RECORD: b"record",
            Roles.SUBTITLE: b"subtitle",
            Roles.IS_SECTION: b"isSection",
            Roles.IS_LOADING: b"isLoading",
            Roles.IS_SELECTED: b"isSelected",
            Roles.SECTION_KEY: b"sectionKey",
        }
    )
    return mapping
