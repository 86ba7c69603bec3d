import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


class FakeResponse:
    """Stand-in for the object returned by ``urllib.request.urlopen``."""

    def __init__(self, body=b"", status=200, headers=None, fail_after=None):
        self._body = body
        self._pos = 0
        self.status = status
        if headers is None:
            headers = {"Content-Length": str(len(body))}
        self.headers = headers
        self.fail_after = fail_after
        self.closed = False

    def read(self, size=-1):
        if self.fail_after is not None and self._pos >= self.fail_after:
            raise ConnectionResetError("connection reset by peer")
        end = len(self._body) if size < 0 else self._pos + size
        if self.fail_after is not None:
            end = min(end, self.fail_after)
        chunk = self._body[self._pos:end]
        self._pos += len(chunk)
        return chunk

    def close(self):
        self.closed = True


def _entry(title, url=None, published=(2024, 3, 5, 10, 30, 0), summary=""):
    entry = {"title": title, "summary": summary}
    if url is not None:
        entry["enclosures"] = [{"href": url, "type": "audio/mpeg"}]
    if published is not None:
        entry["published_parsed"] = tuple(published) + (0, 0, 0)
    return entry


def _feed(title, entries, bozo=0, bozo_exception=None, status=200):
    return {
        "feed": {"title": title},
        "entries": list(entries),
        "bozo": bozo,
        "bozo_exception": bozo_exception,
        "status": status,
    }


# MPEG-1 Layer III, 128 kbit/s, 44.1 kHz, stereo: 417 bytes per frame
MP3_FRAME = b"\xff\xfb\x90\x00" + b"\x00" * 413


@pytest.fixture
def mp3_file(tmp_path):
    path = tmp_path / "silence.mp3"
    path.write_bytes(MP3_FRAME * 40)
    return path


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def make_entry():
    return _entry


@pytest.fixture
def make_feed():
    return _feed


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
