"""Adapter for mapping row view states to Qt model roles."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QSize, Qt

from .roles import Roles
from .row_state import RowViewState


class RecordRowAdapter:
    """Helper to retrieve data from row view states based on Qt roles."""

    def __init__(self, row_height: int) -> None:
        self._row_height = row_height

    def data(self, state: RowViewState, role: int) -> Any:
        """Return the value for the given *state* and *role*."""
        if role == Qt.DisplayRole:
            return state.title
        if role == Qt.DecorationRole:
            return state.picture
        if role == Qt.CheckStateRole:
            if state.loading or state.record is None:
                return None
            return Qt.CheckState.Checked if state.selected else Qt.CheckState.Unchecked
        if role == Qt.SizeHintRole:
            return QSize(-1, self._row_height)
        if role == Roles.RECORD:
            return state.record
        if role == Roles.SUBTITLE:
            return state.subtitle
        if role == Roles.IS_SECTION:
            return False
        if role == Roles.IS_LOADING:
            return state.loading
        if role == Roles.IS_SELECTED:
            return state.selected
        return None
