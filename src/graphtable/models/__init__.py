"""Record storage, section indexing and the (section, row) projection.

The Qt-facing :class:`~graphtable.models.graph_table_model.GraphTableModel`
lives in its own module and is imported from there.
"""

from .delegates import SelectionDelegate, TableDelegate, field_text
from .fields import fields_for_request
from .index_builder import IndexBuilder, SectionIndex, SortDescriptor, group_key_for_field
from .list_projection import ListProjection, RowLocation
from .record_store import Record, RecordStore

__all__ = [
    "IndexBuilder",
    "ListProjection",
    "Record",
    "RecordStore",
    "RowLocation",
    "SectionIndex",
    "SelectionDelegate",
    "SortDescriptor",
    "TableDelegate",
    "field_text",
    "fields_for_request",
    "group_key_for_field",
]
