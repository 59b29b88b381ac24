"""Flat, append-only record storage with the paging flag."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

Record = Mapping[str, object]


class RecordStore:
    """Hold the ordered records loaded so far and whether more may arrive.

    Batches are appended in call order and never removed individually.  An
    empty or ``None`` batch is the terminator: it marks the end of paging but
    leaves the collection untouched.  :meth:`clear` goes back to the initial
    empty, expecting-more state.
    """

    def __init__(self) -> None:
        self._records: Tuple[Record, ...] = ()
        self._expecting_more = True

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    @property
    def expecting_more(self) -> bool:
        return self._expecting_more

    def append(self, batch: Optional[Iterable[Record]]) -> None:
        items = tuple(batch) if batch is not None else ()
        if not items:
            self._expecting_more = False
            logger.debug("RecordStore: terminator append, %d records total", len(self._records))
            return
        self._records = self._records + items
        logger.debug("RecordStore: appended %d records (%d total)", len(items), len(self._records))

    def clear(self) -> None:
        self._records = ()
        self._expecting_more = True

    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)


__all__ = ["Record", "RecordStore"]
