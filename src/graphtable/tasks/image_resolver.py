"""Resolve row pictures with at most one pending fetch per request.

:meth:`ImageResolver.resolve` returns immediately.  It hands back the default
picture when a record has no picture URL, the decoded image when the fetcher
completes synchronously from its cache, and the default picture otherwise
while the fetch runs.  A late completion looks the record up again, because
the index may have been rebuilt in the meantime, and only pushes the picture
to a row that still shows that record.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from PySide6.QtGui import QImage

from ..errors import FetchCancelledError
from ..models.list_projection import RowLocation
from ..models.record_store import Record
from ..utils.image_loader import decode_qimage
from .image_fetcher import Completion
from .pending_fetch_set import FetchPhase, PendingFetchSet

LOGGER = logging.getLogger(__name__)

UrlProvider = Callable[[Record], Optional[str]]
PictureUpdate = Callable[[RowLocation, QImage], None]


class FetchHandle(Protocol):
    def cancel(self) -> None:
        """Best effort; the completion may still arrive later, or not at all."""
        ...


class Fetcher(Protocol):
    def fetch(self, url: str, completion: Completion) -> FetchHandle: ...


def _always_rendered(_location: RowLocation) -> bool:
    return True


class ImageResolver:
    """Issue picture fetches and reconcile their results with the current rows."""

    def __init__(
        self,
        fetcher: Fetcher,
        locate: Callable[[Record], Optional[RowLocation]],
        *,
        is_rendered: Optional[Callable[[RowLocation], bool]] = None,
        default_picture: Optional[QImage] = None,
        decode: Callable[[bytes], Optional[QImage]] = decode_qimage,
    ) -> None:
        self._fetcher = fetcher
        self._locate = locate
        self._is_rendered = is_rendered or _always_rendered
        self._default_picture = default_picture
        self._decode = decode
        self._pending = PendingFetchSet()
        self._closed = False

    @property
    def default_picture(self) -> Optional[QImage]:
        return self._default_picture

    @default_picture.setter
    def default_picture(self, picture: Optional[QImage]) -> None:
        self._default_picture = picture

    @property
    def closed(self) -> bool:
        return self._closed

    def pending_count(self) -> int:
        return len(self._pending)

    def resolve(
        self,
        record: Record,
        url_provider: UrlProvider,
        on_update: PictureUpdate,
    ) -> Optional[QImage]:
        assert not self._closed, "ImageResolver.resolve() called after close()"
        url = url_provider(record)
        if not url:
            return self._default_picture

        # Filled only when the completion runs inside ``fetch``.
        immediate: List[QImage] = []

        def completion(handle: FetchHandle, data: Optional[bytes], error: Optional[Exception]) -> None:
            phase = self._pending.mark_completed(handle)
            if self._closed:
                # Every fetch was issued before close, so this one was tracked.
                assert phase is FetchPhase.RESOLVED, f"untracked completion for {url} after close"
                LOGGER.debug(
                    "ImageResolver: dropped %s after close, %d still draining", url, len(self._pending)
                )
                return
            image = self._decode_result(url, data, error)
            if image is None:
                return
            if phase is FetchPhase.COMPLETED_FIRST:
                immediate.append(image)
                return
            location = self._locate(record)
            if location is None:
                LOGGER.debug("ImageResolver: %s arrived for a record no longer listed", url)
                return
            if not self._is_rendered(location):
                LOGGER.debug("ImageResolver: row %s not rendered, dropping %s", tuple(location), url)
                return
            on_update(location, image)

        handle = self._fetcher.fetch(url, completion)
        self._pending.mark_handle_obtained(handle)

        if immediate:
            return immediate[0]
        return self._default_picture

    def cancel_all(self) -> None:
        """Ask every tracked fetch to cancel without waiting for it."""

        handles = list(self._pending)
        if handles:
            LOGGER.debug("ImageResolver: cancelling %d pending fetches", len(handles))
        for handle in handles:
            handle.cancel()

    def close(self) -> None:
        """Cancel every tracked fetch and stop pushing pictures.

        Does not wait.  Completions that arrive afterwards only leave the
        pending set; they never reach ``on_update``.  :meth:`resolve` must not
        be called once closed.
        """

        self._closed = True
        self.cancel_all()
        if len(self._pending):
            LOGGER.debug("ImageResolver: closed with %d fetches still draining", len(self._pending))

    def _decode_result(
        self,
        url: str,
        data: Optional[bytes],
        error: Optional[Exception],
    ) -> Optional[QImage]:
        if error is not None:
            if isinstance(error, FetchCancelledError):
                LOGGER.debug("ImageResolver: fetch cancelled for %s", url)
            else:
                LOGGER.debug("ImageResolver: fetch failed for %s: %s", url, error)
            return None
        if not data:
            LOGGER.debug("ImageResolver: empty payload for %s", url)
            return None
        image = self._decode(data)
        if image is None or image.isNull():
            LOGGER.debug("ImageResolver: could not decode %d bytes from %s", len(data), url)
            return None
        return image


__all__ = ["Fetcher", "FetchHandle", "ImageResolver", "PictureUpdate", "UrlProvider"]
