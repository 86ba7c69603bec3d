"""ID3 tag writing for downloaded episodes.

Tags are written with mutagen after a download has been committed. Failures
are reported as :class:`TaggingError` so callers can log them and move on.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from mutagen import MutagenError
from mutagen.id3 import COMM, ID3NoHeaderError, TALB, TIT2
from mutagen.mp3 import MP3

logger = logging.getLogger(__name__)


class TaggingError(Exception):
    """Raised when tags cannot be written to an audio file."""


def write_tags(
    file_path: Path,
    *,
    album: str,
    title: str,
    comment: Optional[str] = None,
) -> None:
    """Write album, title and comment frames to the MP3 at *file_path*."""
    try:
        audio = MP3(file_path)
        if audio.tags is None:
            audio.add_tags()

        audio.tags.setall("TALB", [TALB(encoding=3, text=album)])
        audio.tags.setall("TIT2", [TIT2(encoding=3, text=title)])
        if comment:
            audio.tags.setall(
                "COMM", [COMM(encoding=3, lang="eng", desc="", text=comment)]
            )
        audio.save()
    except (MutagenError, OSError) as exc:
        raise TaggingError(f"Failed to write tags to {file_path}: {exc}") from exc

    logger.debug("Tagged %s", Path(file_path).name)


def read_tags(file_path: Path) -> Dict[str, Optional[str]]:
    """Return the album, title and comment stored in *file_path*."""
    metadata: Dict[str, Optional[str]] = {"album": None, "title": None, "comment": None}
    try:
        audio = MP3(file_path)
    except (MutagenError, ID3NoHeaderError, OSError) as exc:
        logger.warning("Failed to read tags from %s: %s", file_path, exc)
        return metadata

    tags = audio.tags
    if tags is None:
        return metadata

    for key, frame_id in (("album", "TALB"), ("title", "TIT2")):
        frames = tags.getall(frame_id)
        if frames and frames[0].text:
            metadata[key] = str(frames[0].text[0])

    comments = tags.getall("COMM")
    if comments and comments[0].text:
        metadata["comment"] = str(comments[0].text[0])

    return metadata
