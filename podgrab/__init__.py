"""Core package for the podgrab project."""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "config",
    "downloader",
    "feeds",
    "logging_setup",
    "memory",
    "metadata",
    "utils",
]
