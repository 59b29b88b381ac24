"""Cancellable asynchronous byte fetching for row pictures."""

from __future__ import annotations

import logging
from collections import OrderedDict
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

import requests
from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from ..config import FETCH_CACHE_ENTRIES, FETCH_TIMEOUT_SEC, REMOTE_URL_SCHEMES
from ..errors import FetchCancelledError, FetchError

if TYPE_CHECKING:  # pragma: no cover - import only for type checking
    from ..settings import SettingsManager

LOGGER = logging.getLogger(__name__)

Completion = Callable[["PendingFetch", Optional[bytes], Optional[Exception]], None]


class PendingFetch:
    """Handle for one fetch; delivers exactly one completion.

    Handles compare by identity so they can key the pending set.
    """

    def __init__(self, url: str, completion: Completion) -> None:
        self._url = url
        self._completion: Optional[Completion] = completion
        self._cancelled = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def finished(self) -> bool:
        return self._completion is None

    def cancel(self) -> None:
        """Stop waiting for the result and complete with :class:`FetchCancelledError`."""

        if self.finished:
            return
        self._cancelled = True
        self._deliver(None, FetchCancelledError(self._url))

    def _deliver(self, data: Optional[bytes], error: Optional[Exception]) -> bool:
        completion = self._completion
        if completion is None:
            return False
        self._completion = None
        completion(self, data, error)
        return True

    def __repr__(self) -> str:
        return f"PendingFetch({self._url!r}, cancelled={self._cancelled})"


def read_url(url: str, timeout: float) -> bytes:
    """Return the bytes behind *url*, raising :class:`FetchError` on failure."""

    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    try:
        if scheme in REMOTE_URL_SCHEMES:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            return response.content
        if scheme == "file":
            return Path(url2pathname(parts.path)).read_bytes()
        return Path(url).read_bytes()
    except (requests.RequestException, OSError) as exc:
        raise FetchError(f"{url}: {exc}") from exc


class ImageFetchJob(QRunnable):
    """Background task that downloads the bytes for one :class:`PendingFetch`."""

    def __init__(self, fetcher: "ImageFetcher", handle: PendingFetch, timeout: float) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._fetcher = fetcher
        self._handle = handle
        self._timeout = timeout

    def run(self) -> None:  # pragma: no cover - executed in worker thread
        if self._handle.cancelled:
            return
        data: Optional[bytes] = None
        error: Optional[Exception] = None
        try:
            data = read_url(self._handle.url, self._timeout)
        except FetchError as exc:
            error = exc
        try:
            self._fetcher._delivered.emit(self._handle, data, error)
        except RuntimeError:
            # pragma: no cover - race with QObject deletion
            pass


class ImageFetcher(QObject):
    """Fetch picture bytes on the global thread pool with a small memory cache.

    Completions always run on the thread that owns the fetcher.  A cache hit
    completes synchronously, before :meth:`fetch` returns.
    """

    _delivered = Signal(object, object, object)

    def __init__(
        self,
        parent: Optional[QObject] = None,
        *,
        timeout_sec: float = FETCH_TIMEOUT_SEC,
        cache_entries: int = FETCH_CACHE_ENTRIES,
        pool: Optional[QThreadPool] = None,
    ) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._timeout = timeout_sec
        self._cache_limit = max(cache_entries, 0)
        self._cache: "OrderedDict[str, bytes]" = OrderedDict()
        self._delivered.connect(self._handle_result)

    @classmethod
    def from_settings(cls, settings: "SettingsManager", parent: Optional[QObject] = None) -> "ImageFetcher":
        fetcher = cls(parent)
        fetcher.apply_settings(settings)
        return fetcher

    def apply_settings(self, settings: "SettingsManager") -> None:
        """Copy the ``fetch.*`` settings; jobs already queued keep their timeout."""
        self.timeout_sec = float(settings.get("fetch.timeout_sec", FETCH_TIMEOUT_SEC))
        self.cache_entries = int(settings.get("fetch.cache_entries", FETCH_CACHE_ENTRIES))

    @property
    def timeout_sec(self) -> float:
        return self._timeout

    @timeout_sec.setter
    def timeout_sec(self, seconds: float) -> None:
        self._timeout = seconds

    @property
    def cache_entries(self) -> int:
        return self._cache_limit

    @cache_entries.setter
    def cache_entries(self, entries: int) -> None:
        self._cache_limit = max(entries, 0)
        self._trim_cache()

    def fetch(self, url: str, completion: Completion) -> PendingFetch:
        handle = PendingFetch(url, completion)
        cached = self._cache.get(url)
        if cached is not None:
            self._cache.move_to_end(url)
            LOGGER.debug("ImageFetcher: cache hit for %s", url)
            handle._deliver(cached, None)
            return handle
        self._pool.start(ImageFetchJob(self, handle, self._timeout))
        return handle

    def cached(self, url: str) -> Optional[bytes]:
        return self._cache.get(url)

    def clear_cache(self) -> None:
        self._cache.clear()

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    def _handle_result(
        self,
        handle: PendingFetch,
        data: Optional[bytes],
        error: Optional[Exception],
    ) -> None:
        if error is None and data is not None:
            self._remember(handle.url, data)
        if not handle._deliver(data, error):
            LOGGER.debug("ImageFetcher: dropped late result for %s", handle.url)

    def _remember(self, url: str, data: bytes) -> None:
        if self._cache_limit <= 0:
            return
        self._cache[url] = data
        self._cache.move_to_end(url)
        self._trim_cache()

    def _trim_cache(self) -> None:
        while len(self._cache) > self._cache_limit:
            self._cache.popitem(last=False)


__all__ = ["Completion", "ImageFetchJob", "ImageFetcher", "PendingFetch", "read_url"]
