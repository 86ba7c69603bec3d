"""Download engine for episode enclosures.

Each episode is streamed into ``<final name>.part`` inside the destination
directory and only renamed to its final name once the whole body has been
written. The enclosure URL is then added to the memory store, which is
persisted straight away. A transfer that fails partway leaves the ``.part``
file on disk and the memory untouched, so the episode is retried on the next
run.
"""

from __future__ import annotations

import enum
import http.client
import logging
import os
import urllib.error
import urllib.request
from datetime import date
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .config import DownloadConfig
from .feeds import Episode
from .memory import MemoryFileError, MemoryStore
from .metadata import TaggingError, write_tags
from .utils import format_bytes, html_to_text

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"


class DownloadError(Exception):
    """Base class for failures that abort a single episode."""

    def __init__(self, episode: Episode, message: str) -> None:
        super().__init__(message)
        self.episode = episode


class NetworkError(DownloadError):
    """The GET request failed or returned a non-success status."""


class StagingError(DownloadError):
    """The ``.part`` file could not be created."""


class TransferError(DownloadError):
    """Copying the response body stopped before the end."""


class DownloadStatus(enum.Enum):
    SKIPPED = "skipped"
    DOWNLOADED = "downloaded"

    @property
    def contribution(self) -> int:
        """Number of files this outcome adds to the run total."""
        return 1 if self is DownloadStatus.DOWNLOADED else 0


class Downloader:
    """Downloads episodes into *dump_dir* and records them in *memory*.

    Parameters
    ----------
    memory:
        Store of already handled enclosure URLs. It is persisted after every
        successful download and every dry-run mark.
    dump_dir:
        Directory that receives the downloaded files.
    dry_run:
        When ``True`` episodes are only marked as handled.
    settings:
        Network, progress and tagging options.
    run_date:
        Date used in file names for episodes without a publication date.
        Defaults to today.
    """

    def __init__(
        self,
        memory: MemoryStore,
        dump_dir: Path | str,
        *,
        dry_run: bool = False,
        settings: Optional[DownloadConfig] = None,
        run_date: Optional[date] = None,
    ) -> None:
        self.memory = memory
        self.dump_dir = Path(dump_dir)
        self.dry_run = dry_run
        self.settings = settings or DownloadConfig()
        self.run_date = run_date or date.today()

    def download(self, item: Episode, index: int = 0, total: int = 1) -> DownloadStatus:
        """Download *item* and return whether a file was produced.

        *index* is zero based and only used for progress output. Failures
        raise a :class:`DownloadError` subclass.
        """
        if item.media_url in self.memory:
            logger.debug("Skipping %s, already downloaded", item.media_url)
            return DownloadStatus.SKIPPED

        if self.dry_run:
            logger.info("Dry run: marking %s as downloaded", item.media_url)
            self._remember(item)
            return DownloadStatus.SKIPPED

        response = self._open(item)
        try:
            final_path = self.dump_dir / item.filename(self.run_date)
            part_path = final_path.with_name(final_path.name + PART_SUFFIX)
            handle = self._stage(item, part_path)
            with handle:
                self._stream(item, response, handle, index, total)
        finally:
            response.close()

        self._commit(item, part_path, final_path)
        return DownloadStatus.DOWNLOADED

    def _open(self, item: Episode):
        request = urllib.request.Request(
            item.media_url, headers={"User-Agent": self.settings.user_agent}
        )
        try:
            response = urllib.request.urlopen(request, timeout=self.settings.timeout)
        except urllib.error.HTTPError as exc:
            exc.close()
            logger.error("Failed to download file from URL: %s HTTP status %s", item.media_url, exc.code)
            raise NetworkError(item, f"GET {item.media_url} returned HTTP {exc.code}") from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
            logger.error("Failed to download file from URL: %s ERROR: %s", item.media_url, exc)
            raise NetworkError(item, f"GET {item.media_url} failed: {exc}") from exc

        # file:, ftp: and data: responses carry no status
        status = getattr(response, "status", None) or 200
        if not 200 <= status < 300:
            response.close()
            logger.error("Failed to download file from URL: %s HTTP status %s", item.media_url, status)
            raise NetworkError(item, f"GET {item.media_url} returned HTTP {status}")
        return response

    def _stage(self, item: Episode, part_path: Path):
        try:
            part_path.parent.mkdir(parents=True, exist_ok=True)
            return open(part_path, "wb")
        except OSError as exc:
            logger.error("Failed to create a new file %s: %s", part_path, exc)
            raise StagingError(item, f"Cannot create {part_path}: {exc}") from exc

    def _stream(self, item: Episode, response, handle, index: int, total: int) -> None:
        length = response.headers.get("Content-Length")
        expected = int(length) if length and length.isdigit() else None

        copied = 0
        with tqdm(
            total=expected,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            desc=f"downloading {index + 1}/{total}",
            leave=False,
            ncols=80,
            colour="green",
            disable=not self.settings.show_progress,
        ) as bar:
            try:
                while True:
                    chunk = response.read(self.settings.chunk_size)
                    if not chunk:
                        break
                    handle.write(chunk)
                    copied += len(chunk)
                    bar.update(len(chunk))
            except (OSError, http.client.HTTPException) as exc:
                logger.error("Failed to copy data to file for %s: %s", item.media_url, exc)
                raise TransferError(item, f"Transfer of {item.media_url} interrupted: {exc}") from exc

        if expected is not None and copied < expected:
            logger.error(
                "Incomplete download of %s: got %d of %d bytes",
                item.media_url,
                copied,
                expected,
            )
            raise TransferError(
                item, f"Transfer of {item.media_url} ended after {copied} of {expected} bytes"
            )
        logger.debug("Copied %s from %s", format_bytes(copied), item.media_url)

    def _commit(self, item: Episode, part_path: Path, final_path: Path) -> None:
        target = final_path
        try:
            os.replace(part_path, final_path)
        except OSError as exc:
            logger.error("Failed to rename downloaded file %s: %s", part_path, exc)
            target = part_path

        self._remember(item)
        logger.info("Downloaded %s", target.name)

        if self.settings.write_tags and target == final_path:
            self._tag(item, final_path)

    def _remember(self, item: Episode) -> None:
        self.memory.add(item.media_url)
        try:
            self.memory.persist()
        except MemoryFileError as exc:
            logger.error("Unable to update memory file. ERROR: %s", exc)

    def _tag(self, item: Episode, path: Path) -> None:
        try:
            write_tags(
                path,
                album=item.origin,
                title=item.title,
                comment=html_to_text(item.description) or None,
            )
        except TaggingError as exc:
            logger.warning("%s", exc)
