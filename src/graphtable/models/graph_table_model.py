"""Qt item model exposing records grouped into lettered sections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QAbstractItemModel, QModelIndex, QObject, Qt, Signal
from PySide6.QtGui import QImage

from ..config import DEFAULT_ROW_HEIGHT
from ..tasks.image_fetcher import ImageFetcher
from ..tasks.image_resolver import Fetcher, ImageResolver
from .delegates import SelectionDelegate, TableDelegate
from .index_builder import (
    Comparator,
    GroupKeyFn,
    IndexBuilder,
    SectionIndex,
    SortDescriptor,
    group_key_for_field,
)
from .list_projection import ListProjection, RowLocation
from .record_row_adapter import RecordRowAdapter
from .record_store import Record, RecordStore
from .roles import Roles, role_names
from .row_state import RowViewState

if TYPE_CHECKING:  # pragma: no cover - import only for type checking
    from ..settings import SettingsManager


logger = logging.getLogger(__name__)

DataNeededCallback = Callable[["GraphTableModel", RowLocation], None]


@dataclass(frozen=True, eq=False, slots=True)
class _SectionNode:
    """Internal pointer carried by model indexes; identifies the parent section."""

    section: int


# Pointer of top-level (section) indexes.
_TOP_LEVEL = _SectionNode(-1)


@dataclass(slots=True)
class _RowVisual:
    """Picture state of a row that has been rendered since the last rebuild."""

    record: Record
    picture: Optional[QImage] = None


class GraphTableModel(QAbstractItemModel):
    """Expose a paged record collection to Qt views as a two-level tree.

    Top-level rows are sections keyed by the first letter of
    ``group_by_field``; their children are the records of that section.
    While more data is expected and a data-needed callback is registered,
    the last section ends with a loading row that asks for the next batch
    each time it is rendered (see :attr:`data_needed`).

    Property changes do not update the model on their own; call
    :meth:`rebuild_index` once the configuration is complete.
    """

    dataNeeded = Signal(int, int)
    pictureUpdated = Signal(int, int)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        fetcher: Optional[Fetcher] = None,
        delegate: Optional[TableDelegate] = None,
        selection_delegate: Optional[SelectionDelegate] = None,
        data_needed: Optional[DataNeededCallback] = None,
        group_by_field: Optional[str] = None,
        sort_descriptors: Optional[Sequence[Comparator]] = None,
        default_picture: Optional[QImage] = None,
        row_height: int = DEFAULT_ROW_HEIGHT,
    ) -> None:
        super().__init__(parent)
        self._store = RecordStore()
        self._index = SectionIndex()
        self._delegate = delegate or TableDelegate()
        self._selection_delegate = selection_delegate or SelectionDelegate()
        self._data_needed = data_needed
        self._group_by_field = group_by_field
        self._index_group_key: GroupKeyFn = group_key_for_field(group_by_field)
        self._sort_descriptors: List[Comparator] = list(sort_descriptors or [])
        self._pictures_enabled = False
        self._subtitles_enabled = False
        self._row_rendered: Optional[Callable[[RowLocation], bool]] = None
        self._row_visuals: Dict[RowLocation, _RowVisual] = {}
        self._row_adapter = RecordRowAdapter(row_height)
        self._section_nodes: List[_SectionNode] = []

        self._projection = ListProjection(
            lambda: self._index,
            lambda: self._store.expecting_more,
            lambda: self._data_needed is not None,
            lambda: self._index_group_key,
        )
        self._fetcher: Fetcher = fetcher if fetcher is not None else ImageFetcher(self)
        self._resolver = ImageResolver(
            self._fetcher,
            self._projection.location_of,
            is_rendered=self._is_row_rendered,
            default_picture=default_picture,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def delegate(self) -> TableDelegate:
        return self._delegate

    @delegate.setter
    def delegate(self, delegate: Optional[TableDelegate]) -> None:
        self._delegate = delegate or TableDelegate()

    @property
    def selection_delegate(self) -> SelectionDelegate:
        return self._selection_delegate

    @selection_delegate.setter
    def selection_delegate(self, delegate: Optional[SelectionDelegate]) -> None:
        self._selection_delegate = delegate or SelectionDelegate()

    @property
    def fetcher(self) -> Fetcher:
        return self._fetcher

    @property
    def data_needed(self) -> Optional[DataNeededCallback]:
        """Callback asking the host for the next batch.

        It runs every time the loading row is rendered, and views render a row
        many times, so it must be idempotent: ignore calls while a request is
        already in flight.
        """
        return self._data_needed

    @data_needed.setter
    def data_needed(self, callback: Optional[DataNeededCallback]) -> None:
        def apply() -> None:
            self._data_needed = callback

        self._change_paging(
            expecting_more=self._store.expecting_more,
            callback=callback,
            apply=apply,
        )

    @property
    def group_by_field(self) -> Optional[str]:
        return self._group_by_field

    @group_by_field.setter
    def group_by_field(self, field_name: Optional[str]) -> None:
        self._group_by_field = field_name or None

    @property
    def sort_descriptors(self) -> Tuple[Comparator, ...]:
        return tuple(self._sort_descriptors)

    @sort_descriptors.setter
    def sort_descriptors(self, descriptors: Optional[Iterable[Comparator]]) -> None:
        self._sort_descriptors = list(descriptors or [])

    def set_sorting_by_single_field(self, field_name: str, ascending: bool = True) -> None:
        """Sort rows within each section by *field_name*, ignoring case."""
        self._sort_descriptors = [SortDescriptor(field_name, ascending)]

    @property
    def pictures_enabled(self) -> bool:
        return self._pictures_enabled

    @pictures_enabled.setter
    def pictures_enabled(self, enabled: bool) -> None:
        self._pictures_enabled = bool(enabled)

    @property
    def subtitles_enabled(self) -> bool:
        return self._subtitles_enabled

    @subtitles_enabled.setter
    def subtitles_enabled(self, enabled: bool) -> None:
        self._subtitles_enabled = bool(enabled)

    @property
    def default_picture(self) -> Optional[QImage]:
        return self._resolver.default_picture

    @default_picture.setter
    def default_picture(self, picture: Optional[QImage]) -> None:
        self._resolver.default_picture = picture

    def set_row_rendered_predicate(self, predicate: Optional[Callable[[RowLocation], bool]]) -> None:
        """Let the host view narrow which rows count as on screen."""
        self._row_rendered = predicate

    def apply_settings(self, settings: "SettingsManager") -> None:
        """Copy the ``table.*`` settings onto this model.

        ``fetch.*`` settings go to the built-in :class:`ImageFetcher`; a
        fetcher passed in by the host keeps its own configuration.
        """
        self.group_by_field = settings.get("table.group_by_field")
        sort_field = settings.get("table.sort_field")
        if sort_field:
            self.set_sorting_by_single_field(sort_field, bool(settings.get("table.sort_ascending", True)))
        else:
            self.sort_descriptors = None
        self.pictures_enabled = bool(settings.get("table.pictures_enabled", False))
        self.subtitles_enabled = bool(settings.get("table.subtitles_enabled", False))
        if isinstance(self._fetcher, ImageFetcher):
            self._fetcher.apply_settings(settings)

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------
    def append_records(self, batch: Optional[Iterable[Record]]) -> None:
        """Append *batch*; ``None`` or an empty batch ends paging.

        New records become visible after the next :meth:`rebuild_index`.
        """
        items = list(batch) if batch is not None else []
        if items:
            self._store.append(items)
            return
        self._change_paging(
            expecting_more=False,
            callback=self._data_needed,
            apply=lambda: self._store.append(None),
        )

    def clear_records(self) -> None:
        self.beginResetModel()
        self._store.clear()
        self._index = SectionIndex()
        self._row_visuals.clear()
        self.endResetModel()

    def has_records(self) -> bool:
        return not self._store.is_empty()

    @property
    def expecting_more(self) -> bool:
        return self._store.expecting_more

    def rebuild_index(self) -> None:
        """Regroup, filter and sort every stored record, then reset views."""
        group_key = group_key_for_field(self._group_by_field)
        index = IndexBuilder.rebuild(
            self._store.records,
            self._delegate.includes,
            group_key,
            self._sort_descriptors,
        )
        self.beginResetModel()
        self._index = index
        self._index_group_key = group_key
        self._row_visuals.clear()
        self.endResetModel()
        logger.debug(
            "GraphTableModel: rebuilt %d sections from %d records",
            len(index),
            len(self._store),
        )

    def cancel_all_fetches(self) -> None:
        self._resolver.cancel_all()

    def close(self) -> None:
        """Cancel outstanding fetches and stop loading pictures.

        Does not wait for cancelled fetches; rows rendered afterwards show the
        default picture.
        """
        self._resolver.close()

    def pending_fetch_count(self) -> int:
        return self._resolver.pending_count()

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------
    def section_count(self) -> int:
        return self._projection.section_count()

    def row_count(self, section: int) -> int:
        return self._projection.row_count(section)

    def section_titles(self) -> Tuple[str, ...]:
        return self._projection.section_titles()

    def record_at(self, section: int, row: int) -> Optional[Record]:
        return self._projection.record_at(section, row)

    def location_of(self, record: Record) -> Optional[RowLocation]:
        return self._projection.location_of(record)

    def is_paging_sentinel(self, section: int, row: int) -> bool:
        return self._projection.is_paging_sentinel(section, row)

    def row_state(self, section: int, row: int) -> RowViewState:
        """Render one row: its record's text, picture and selection.

        Rendering the paging sentinel notifies the data-needed callback on
        every call.
        """
        return self._build_row_state(RowLocation(section, row), notify=True)

    # ------------------------------------------------------------------
    # QAbstractItemModel API
    # ------------------------------------------------------------------
    def columnCount(self, _parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        return 1

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        if not parent.isValid():
            return self._projection.section_count()
        if self._section_of(parent) is None:
            return self._projection.row_count(parent.row())
        return 0

    def index(self, row: int, column: int, parent: QModelIndex = QModelIndex()) -> QModelIndex:  # noqa: N802
        if column != 0 or row < 0:
            return QModelIndex()
        if not parent.isValid():
            if row < self._projection.section_count():
                return self.createIndex(row, column, _TOP_LEVEL)
            return QModelIndex()
        if self._section_of(parent) is not None:
            return QModelIndex()
        section = parent.row()
        if row < self._projection.row_count(section):
            return self.createIndex(row, column, self._node_for(section))
        return QModelIndex()

    def parent(self, index: QModelIndex) -> QModelIndex:  # noqa: N802
        if not index.isValid():
            return QModelIndex()
        section = self._section_of(index)
        if section is None:
            return QModelIndex()
        return self.createIndex(section, 0, _TOP_LEVEL)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # noqa: N802
        if not index.isValid():
            return None
        section = self._section_of(index)
        if section is None:
            return self._section_data(index.row(), role)
        location = RowLocation(section, index.row())
        state = self._build_row_state(location, notify=role == Qt.DisplayRole)
        return self._row_adapter.data(state, role)

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:  # noqa: N802
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        section = self._section_of(index)
        if section is None or self._projection.is_paging_sentinel(section, index.row()):
            return Qt.ItemFlag.ItemIsEnabled
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return role_names(super().roleNames())

    def index_for_location(self, location: RowLocation) -> QModelIndex:
        return self.index(location.row, 0, self.index(location.section, 0))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _node_for(self, section: int) -> _SectionNode:
        while len(self._section_nodes) <= section:
            self._section_nodes.append(_SectionNode(len(self._section_nodes)))
        return self._section_nodes[section]

    @staticmethod
    def _section_of(index: QModelIndex) -> Optional[int]:
        """Return the parent section of a record-row *index*, ``None`` for sections."""
        node = index.internalPointer()
        if not isinstance(node, _SectionNode) or node is _TOP_LEVEL:
            return None
        return node.section

    def _section_data(self, section: int, role: int):
        key = self._projection.section_title(section)
        if key is None:
            return None
        if role in (Qt.DisplayRole, Roles.SECTION_KEY):
            return key
        if role == Roles.IS_SECTION:
            return True
        return None

    def _build_row_state(self, location: RowLocation, *, notify: bool) -> RowViewState:
        if self._projection.is_paging_sentinel(*location):
            if notify:
                self._notify_data_needed(location)
            return RowViewState.activity()

        record = self._projection.record_at(*location)
        if record is None:
            return RowViewState.empty()

        picture = None
        if self._pictures_enabled and self._resolver.closed:
            picture = self._resolver.default_picture
        elif self._pictures_enabled:
            picture = self._picture_for(location, record)
        subtitle = self._delegate.subtitle(record) if self._subtitles_enabled else ""
        return RowViewState(
            record=record,
            title=self._delegate.title(record),
            subtitle=subtitle,
            picture=picture,
            selected=self._selection_delegate.is_selected(record),
        )

    def _picture_for(self, location: RowLocation, record: Record) -> Optional[QImage]:
        visual = self._row_visuals.get(location)
        if visual is not None and visual.record is record:
            if visual.picture is not None:
                return visual.picture
            return self._resolver.default_picture

        # Register the row before resolving so a synchronous result lands in it.
        visual = _RowVisual(record)
        self._row_visuals[location] = visual
        picture = self._resolver.resolve(record, self._delegate.picture_url, self._on_picture_resolved)
        if picture is not None and picture is not self._resolver.default_picture:
            visual.picture = picture
        return picture

    def _is_row_rendered(self, location: RowLocation) -> bool:
        if location not in self._row_visuals:
            return False
        if self._row_rendered is None:
            return True
        return bool(self._row_rendered(location))

    def _on_picture_resolved(self, location: RowLocation, picture: QImage) -> None:
        visual = self._row_visuals.get(location)
        if visual is None:
            return
        visual.picture = picture
        model_index = self.index_for_location(location)
        if model_index.isValid():
            self.dataChanged.emit(model_index, model_index, [Qt.DecorationRole])
        self.pictureUpdated.emit(location.section, location.row)

    def _notify_data_needed(self, location: RowLocation) -> None:
        callback = self._data_needed
        if callback is None:
            return
        logger.debug("GraphTableModel: requesting more data from row %s", tuple(location))
        self.dataNeeded.emit(location.section, location.row)
        callback(self, location)

    def _change_paging(
        self,
        *,
        expecting_more: bool,
        callback: Optional[DataNeededCallback],
        apply: Callable[[], None],
    ) -> None:
        """Run *apply* and tell views when the sentinel row appears or goes."""
        before = self._projection.shows_paging_sentinel()
        after = expecting_more and callback is not None
        count = self._projection.section_count()
        if count == 0 or before == after:
            apply()
            return
        last = count - 1
        sentinel_row = self._projection.record_count(last)
        parent_index = self.index(last, 0)
        if before:
            self.beginRemoveRows(parent_index, sentinel_row, sentinel_row)
            apply()
            self.endRemoveRows()
        else:
            self.beginInsertRows(parent_index, sentinel_row, sentinel_row)
            apply()
            self.endInsertRows()
