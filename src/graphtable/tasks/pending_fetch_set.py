"""Rendezvous bookkeeping for in-flight image fetches.

Each fetch is touched from two places that may run in either order: the
issuing call, once it holds the handle, and the completion callback.  Both
toggle the handle's membership.  Whichever runs first inserts it and records
which side that was; whichever runs second removes it.  A handle present in
the set therefore always means "one side has run, the other has not".
"""

from __future__ import annotations

import threading
from enum import Enum, auto
from typing import Dict, Hashable, Iterator, List, Optional


class FetchPhase(Enum):
    """State of one fetch in the issue/complete rendezvous."""

    HANDLE_OBTAINED_FIRST = auto()
    COMPLETED_FIRST = auto()
    RESOLVED = auto()


class PendingFetchSet:
    """Toggle-membership set keyed by fetch handle identity."""

    def __init__(self) -> None:
        self._phases: Dict[Hashable, FetchPhase] = {}
        self._lock = threading.Lock()

    def toggle(self, handle: Hashable, first_phase: FetchPhase = FetchPhase.HANDLE_OBTAINED_FIRST) -> bool:
        """Insert *handle* if absent, remove it if present.

        Returns ``True`` when the handle was inserted.
        """
        with self._lock:
            if handle in self._phases:
                del self._phases[handle]
                return False
            self._phases[handle] = first_phase
            return True

    def mark_handle_obtained(self, handle: Hashable) -> FetchPhase:
        """Record that the issuing side now holds *handle*."""
        return self._transition(handle, FetchPhase.HANDLE_OBTAINED_FIRST)

    def mark_completed(self, handle: Hashable) -> FetchPhase:
        """Record that the completion for *handle* is running."""
        return self._transition(handle, FetchPhase.COMPLETED_FIRST)

    def phase_of(self, handle: Hashable) -> Optional[FetchPhase]:
        with self._lock:
            return self._phases.get(handle)

    def clear(self) -> None:
        with self._lock:
            self._phases.clear()

    def _transition(self, handle: Hashable, side: FetchPhase) -> FetchPhase:
        with self._lock:
            recorded = self._phases.get(handle)
            if recorded is None:
                self._phases[handle] = side
                return side
            assert recorded is not side, f"{side.name} reported twice for the same fetch"
            del self._phases[handle]
            return FetchPhase.RESOLVED

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._phases

    def __len__(self) -> int:
        with self._lock:
            return len(self._phases)

    def __iter__(self) -> Iterator[Hashable]:
        with self._lock:
            snapshot: List[Hashable] = list(self._phases)
        return iter(snapshot)


__all__ = ["FetchPhase", "PendingFetchSet"]
