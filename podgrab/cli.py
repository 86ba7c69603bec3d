"""Command line entry point: download new episodes from the listed feeds.

Feeds are read from the sources file, episodes already recorded in the memory
file are skipped, and everything else is downloaded one at a time into the
destination directory.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import (
    ConfigManager,
    ConfigurationError,
    DEFAULT_MEMORY_FILE,
    DEFAULT_SOURCES_FILE,
)
from .downloader import Downloader, DownloadError
from .feeds import SourcesFileError, fetch_candidates, load_sources
from .logging_setup import default_log_file, setup_logging
from .memory import MemoryFileError, MemoryStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SETUP_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podgrab",
        description="Download new podcast episodes from a list of feeds",
    )
    parser.add_argument(
        "--src",
        dest="sources_file",
        help=f"File with podcast feed URLs, one per line (default: {DEFAULT_SOURCES_FILE})",
    )
    parser.add_argument(
        "--mem",
        dest="memory_file",
        help=f"Memory file with already downloaded links (default: {DEFAULT_MEMORY_FILE})",
    )
    parser.add_argument(
        "--dump",
        dest="dump_dir",
        help="Directory where downloaded files are stored (default: current directory)",
    )
    parser.add_argument(
        "-d",
        "--dry",
        dest="dry_run",
        action="store_true",
        default=None,
        help="Add links to the memory file without downloading any files",
    )
    parser.add_argument("--profile", help="Configuration profile to load")
    parser.add_argument("--log-file", help="Path of the log file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--no-tags",
        dest="write_tags",
        action="store_false",
        default=None,
        help="Do not write ID3 tags to downloaded files",
    )
    parser.add_argument(
        "--no-progress",
        dest="show_progress",
        action="store_false",
        default=None,
        help="Hide the per-file progress bar",
    )
    return parser


def _apply_arguments(manager: ConfigManager, args: argparse.Namespace) -> None:
    config = manager.config
    for key in ("sources_file", "memory_file", "dump_dir"):
        value = getattr(args, key)
        if value is not None:
            setattr(config, key, Path(value).expanduser())
    if args.dry_run is not None:
        config.dry_run = args.dry_run
    if args.write_tags is not None:
        config.download.write_tags = args.write_tags
    if args.show_progress is not None:
        config.download.show_progress = args.show_progress


def summary(downloaded: int) -> str:
    if downloaded == 0:
        return "No files downloaded."
    return f"Successfully downloaded {downloaded} files."


def run(manager: ConfigManager) -> int:
    """Fetch every feed and download new episodes. Returns an exit code."""
    config = manager.config

    try:
        links = load_sources(config.sources_file)
    except SourcesFileError as exc:
        print(exc, file=sys.stderr)
        return EXIT_SETUP_ERROR

    try:
        memory = MemoryStore.load(config.memory_file)
    except MemoryFileError as exc:
        print(exc, file=sys.stderr)
        return EXIT_SETUP_ERROR

    downloader = Downloader(
        memory,
        config.dump_dir,
        dry_run=config.dry_run,
        settings=config.download,
    )

    downloaded = 0
    failed = 0
    try:
        items = fetch_candidates(links, memory, user_agent=config.download.user_agent)
        logger.info("%d new episodes across %d feeds", len(items), len(links))

        for index, item in enumerate(items):
            try:
                status = downloader.download(item, index, len(items))
            except DownloadError as exc:
                logger.warning("Skipping %s: %s", item.title or item.media_url, exc)
                failed += 1
                continue
            downloaded += status.contribution
    except KeyboardInterrupt:
        logger.warning(
            "Interrupted after %d downloads; the episode in progress will be retried",
            downloaded,
        )
        print(summary(downloaded))
        return EXIT_INTERRUPTED

    if failed:
        logger.info("%d episodes failed and will be retried on the next run", failed)
    print(summary(downloaded))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        manager = ConfigManager(profile=args.profile)
        _apply_arguments(manager, args)
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        return EXIT_SETUP_ERROR

    errors = manager.config.validate()
    if errors:
        print("Invalid arguments:\n" + "\n".join(errors), file=sys.stderr)
        return EXIT_SETUP_ERROR

    level = logging.DEBUG if args.verbose else logging.getLevelName(manager.config.log_level.value)
    setup_logging(args.log_file or default_log_file(manager.config.log_dir), level=level)

    return run(manager)


if __name__ == "__main__":
    raise SystemExit(main())
