"""Persistent record of episode enclosures that were already handled.

The memory file is plain text with one media URL per line. It is read once at
start-up and rewritten after every committed download so that an interrupted
run never re-fetches episodes that already finished.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)


class MemoryFileError(Exception):
    """Raised when the memory file cannot be read or written."""


class MemoryStore:
    """Set of enclosure URLs backed by a line-delimited file."""

    def __init__(self, path: Path | str, urls: Iterable[str] = ()) -> None:
        self.path = Path(path)
        self._urls: set[str] = {u for u in urls if u}

    @classmethod
    def load(cls, path: Path | str) -> "MemoryStore":
        """Read *path* and return a populated store.

        A missing file is created empty. Any other failure to read raises
        :class:`MemoryFileError`.
        """
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning(
                "File with previously downloaded links not found. Creating %s", path
            )
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch()
            except OSError as exc:
                raise MemoryFileError(f"Unable to create memory file {path}: {exc}") from exc
            return cls(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise MemoryFileError(f"Unable to read memory file {path}: {exc}") from exc

        store = cls(path, (line.strip() for line in raw.splitlines()))
        logger.debug("Loaded %d remembered links from %s", len(store), path)
        return store

    def contains(self, url: str) -> bool:
        return url in self._urls

    def add(self, url: str) -> None:
        """Remember *url*. The file is not touched until :meth:`persist`."""
        if url:
            self._urls.add(url)

    def persist(self, path: Path | str | None = None) -> None:
        """Write the store to disk, one URL per line."""
        target = Path(path) if path else self.path
        tmp = target.with_name(target.name + ".tmp")
        payload = "".join(f"{url}\n" for url in sorted(self._urls))
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, target)
        except OSError as exc:
            raise MemoryFileError(f"Unable to update memory file {target}: {exc}") from exc

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)
