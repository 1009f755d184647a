"""Custom exceptions for the polling watcher."""

from pathlib import Path


class WatcherError(Exception):
    """Base exception for all watcher errors."""
    pass


class WatchConfigError(WatcherError, ValueError):
    """Invalid watch root or configuration, raised before watching starts."""
    pass


class DirectoryReadError(WatcherError):
    """A directory under the watch root could not be listed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot read directory {path}: {reason}")
        self.path = path
        self.reason = reason
