"""Build the section index used by the list projection.

The index is rebuilt from scratch on every request: records are filtered,
bucketed by a derived section key in first-seen order, each bucket is sorted
by the configured descriptors and finally the keys themselves are sorted with
a locale-aware, case-insensitive collation.  The resulting
:class:`SectionIndex` is immutable so swapping it in is a single assignment.
"""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .record_store import Record

logger = logging.getLogger(__name__)

RecordFilter = Callable[[Record], bool]
GroupKeyFn = Callable[[Record], str]


def collation_key(text: str) -> str:
    """Return a sort key comparing *text* case-insensitively in the current locale."""

    return locale.strxfrm(text.casefold())


@dataclass(frozen=True, slots=True)
class SortDescriptor:
    """Order records by one field.

    String values compare case-insensitively with locale collation.  Missing
    values rank lowest: they come first when ascending and last when
    descending.  Incomplete records never break a rebuild.
    """

    field: str
    ascending: bool = True

    def sort_key(self, record: Record) -> Tuple[int, Any]:
        value = record.get(self.field) if isinstance(record, Mapping) else None
        if value is None:
            return (0, "")
        if isinstance(value, bool):
            return (1, int(value))
        if isinstance(value, (int, float)):
            return (1, value)
        if isinstance(value, str):
            return (2, collation_key(value))
        return (3, collation_key(str(value)))


Comparator = Union[SortDescriptor, Callable[[Record], Any]]


def group_key_for_field(field_name: Optional[str]) -> GroupKeyFn:
    """Return a key function grouping records by the first letter of *field_name*.

    A missing field, a non-string value or no field at all map to ``""``.
    """

    def key_of(record: Record) -> str:
        if not field_name or not isinstance(record, Mapping):
            return ""
        value = record.get(field_name)
        if not isinstance(value, str):
            return ""
        return value[:1].upper()

    return key_of


def accept_all(_record: Record) -> bool:
    return True


@dataclass(frozen=True)
class SectionIndex:
    """Ordered section keys plus the records filed under each key."""

    keys: Tuple[str, ...] = ()
    sections: Mapping[str, Tuple[Record, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __len__(self) -> int:
        return len(self.keys)

    def is_empty(self) -> bool:
        return not self.keys

    def key_at(self, section: int) -> Optional[str]:
        if 0 <= section < len(self.keys):
            return self.keys[section]
        return None

    def records_in(self, section: int) -> Tuple[Record, ...]:
        key = self.key_at(section)
        if key is None:
            return ()
        return self.sections.get(key, ())

    def section_of_key(self, key: str) -> Optional[int]:
        try:
            return self.keys.index(key)
        except ValueError:
            return None

    def record_count(self) -> int:
        return sum(len(records) for records in self.sections.values())


class IndexBuilder:
    """Turn a flat record sequence into a :class:`SectionIndex`."""

    @staticmethod
    def rebuild(
        records: Sequence[Record],
        record_filter: Optional[RecordFilter],
        group_key_fn: GroupKeyFn,
        comparators: Optional[Sequence[Comparator]] = None,
    ) -> SectionIndex:
        include = record_filter or accept_all
        keys: List[str] = []
        buckets: Dict[str, List[Record]] = {}

        skipped = 0
        for record in records:
            if not include(record):
                skipped += 1
                continue
            key = group_key_fn(record)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = []
                buckets[key] = bucket
                keys.append(key)
            bucket.append(record)

        if comparators:
            for bucket in buckets.values():
                _sort_records(bucket, comparators)

        keys.sort(key=collation_key)

        logger.debug(
            "IndexBuilder: %d records into %d sections (%d filtered out)",
            len(records) - skipped,
            len(keys),
            skipped,
        )
        return SectionIndex(
            keys=tuple(keys),
            sections=MappingProxyType({key: tuple(buckets[key]) for key in keys}),
        )


def _sort_records(bucket: List[Record], comparators: Sequence[Comparator]) -> None:
    # Stable multi-pass sort: the least significant comparator goes first.
    for comparator in reversed(comparators):
        if isinstance(comparator, SortDescriptor):
            bucket.sort(key=comparator.sort_key, reverse=not comparator.ascending)
        else:
            bucket.sort(key=comparator)


__all__ = [
    "Comparator",
    "GroupKeyFn",
    "IndexBuilder",
    "RecordFilter",
    "SectionIndex",
    "SortDescriptor",
    "accept_all",
    "collation_key",
    "group_key_for_field",
]
