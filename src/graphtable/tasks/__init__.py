"""Background picture fetching and resolution."""

from __future__ import annotations

from .image_fetcher import ImageFetchJob, ImageFetcher, PendingFetch
from .image_resolver import ImageResolver
from .pending_fetch_set import FetchPhase, PendingFetchSet

__all__ = [
    "FetchPhase",
    "ImageFetchJob",
    "ImageFetcher",
    "ImageResolver",
    "PendingFetch",
    "PendingFetchSet",
]
