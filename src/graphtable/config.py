"""Default configuration values for graphtable."""

from __future__ import annotations

from typing import Final

SETTINGS_SCHEMA_ID: Final[str] = "graphtable/settings@1"
SETTINGS_DIR_NAME: Final[str] = "graphtable"
SETTINGS_FILE_NAME: Final[str] = "settings.json"

# Row height handed to views that ask for a size hint.
DEFAULT_ROW_HEIGHT: Final[int] = 40

# Remote fetches give up after this many seconds; the row keeps its
# placeholder when that happens.
FETCH_TIMEOUT_SEC: Final[float] = 10.0

# Number of fetched payloads kept by :class:`ImageFetcher`.  A hit completes
# synchronously inside ``fetch``.
FETCH_CACHE_ENTRIES: Final[int] = 256

# Only these URL schemes are sent through ``requests``; everything else is
# treated as a local path.
REMOTE_URL_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})
