import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Qt must not try to reach a display server in headless runs.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402
from PySide6.QtGui import QColor, QImage  # noqa: E402

from graphtable.errors import FetchCancelledError, FetchError  # noqa: E402


class FakeHandle:
    """Handle returned by :class:`FakeFetcher`; completes at most once."""

    def __init__(self, url, completion, deliver_on_cancel=True):
        self.url = url
        self._completion = completion
        self._deliver_on_cancel = deliver_on_cancel
        self.cancel_calls = 0

    @property
    def finished(self):
        return self._completion is None

    def deliver(self, data=None, error=None):
        completion, self._completion = self._completion, None
        if completion is not None:
            completion(self, data, error)

    def cancel(self):
        self.cancel_calls += 1
        if self._deliver_on_cancel:
            self.deliver(None, FetchCancelledError(self.url))


class FakeFetcher:
    """In-memory fetcher; URLs listed in ``cached`` complete inside ``fetch``.

    With ``deliver_on_cancel`` off, ``cancel()`` only records the call and the
    fetch stays open until :meth:`complete` runs it.
    """

    def __init__(self, deliver_on_cancel=True):
        self.cached = {}
        self.handles = []
        self.deliver_on_cancel = deliver_on_cancel

    def fetch(self, url, completion):
        handle = FakeHandle(url, completion, self.deliver_on_cancel)
        self.handles.append(handle)
        if url in self.cached:
            handle.deliver(self.cached[url], None)
        return handle

    def open_handles(self):
        return [handle for handle in self.handles if not handle.finished]

    def complete(self, url, data=b"png", error=None):
        for handle in self.open_handles():
            if handle.url == url:
                handle.deliver(data, error)
                return handle
        raise AssertionError(f"no open fetch for {url}")

    def fail(self, url):
        return self.complete(url, None, FetchError(f"{url}: boom"))


def make_image(color="red"):
    image = QImage(2, 2, QImage.Format.Format_ARGB32)
    image.fill(QColor(color))
    return image


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def decode_stub():
    """Decode any non-empty payload into a small red image."""

    def decode(data):
        return make_image() if data else None

    return decode
