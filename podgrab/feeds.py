"""Feed parsing and discovery of episodes that still need downloading."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

import feedparser

from .memory import MemoryStore
from .utils import sanitize

logger = logging.getLogger(__name__)


class SourcesFileError(Exception):
    """Raised when the list of feed URLs cannot be read."""


@dataclass(frozen=True)
class Episode:
    """A single episode whose enclosure has not been downloaded yet."""

    origin: str
    title: str
    published_at: Optional[datetime]
    media_url: str
    description: str = ""

    def filename(self, fallback_date: date) -> str:
        """Return ``"<YYYY-MM-DD> - <origin> - <title>.mp3"``.

        *fallback_date* is used when the feed did not provide a publication
        timestamp for this entry.
        """
        day = self.published_at.date() if self.published_at else fallback_date
        return f"{day:%Y-%m-%d} - {sanitize(self.origin)} - {sanitize(self.title)}.mp3"


def load_sources(path: Path | str) -> list[str]:
    """Return the feed URLs listed in *path*, one per line."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourcesFileError(
            f"Unable to load file with sources, unexpected error: {exc}"
        ) from exc
    return [line.strip() for line in raw.splitlines() if line.strip()]


def _to_datetime(parsed: Any) -> Optional[datetime]:
    # feedparser normalises dates to UTC struct_time
    if not parsed:
        return None
    try:
        return datetime(*parsed[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def _enclosure_url(entry: Any) -> Optional[str]:
    enclosures = entry.get("enclosures") or []
    if not enclosures:
        return None
    href = enclosures[0].get("href")
    return href.strip() if href else None


def _parse_feed(url: str, user_agent: Optional[str]):
    """Return the parsed feed for *url* or ``None`` when it is unusable."""
    try:
        if user_agent:
            parsed = feedparser.parse(url, agent=user_agent)
        else:
            parsed = feedparser.parse(url)
    except Exception as exc:
        logger.warning("Unable to parse url: %s. Error: %s", url, exc)
        return None

    status = parsed.get("status")
    if status is not None and status >= 400:
        logger.warning("Unable to parse url: %s. HTTP status %s", url, status)
        return None

    entries = parsed.get("entries") or []
    if parsed.get("bozo"):
        reason = parsed.get("bozo_exception")
        if not entries:
            logger.warning("Unable to parse url: %s. Error: %s", url, reason)
            return None
        logger.warning("Feed %s may be malformed: %s", url, reason)
    return parsed


def fetch_candidates(
    feed_urls: Iterable[str],
    store: MemoryStore,
    *,
    user_agent: Optional[str] = None,
) -> list[Episode]:
    """Return episodes from *feed_urls* whose enclosure is not in *store*.

    Feeds are processed in the given order and entries keep their feed order.
    A feed that cannot be fetched or parsed is logged and skipped.
    """
    candidates: list[Episode] = []

    for url in feed_urls:
        url = url.strip()
        if not url:
            continue
        parsed = _parse_feed(url, user_agent)
        if parsed is None:
            continue

        origin = (parsed.get("feed") or {}).get("title", "")
        found = 0
        for entry in parsed.get("entries") or []:
            media_url = _enclosure_url(entry)
            if not media_url or media_url in store:
                continue
            candidates.append(
                Episode(
                    origin=origin,
                    title=entry.get("title", ""),
                    published_at=_to_datetime(
                        entry.get("published_parsed") or entry.get("updated_parsed")
                    ),
                    media_url=media_url,
                    description=entry.get("summary", "") or "",
                )
            )
            found += 1
        logger.info("Found %d new episodes in %s", found, origin or url)

    return candidates
