"""
pollmon Path Filter.

Decides whether a discovered file is evaluated for changes at all.
Requires Python 3.11+.
"""

from collections.abc import Iterable
from pathlib import Path

from pollmon.watcher.models import WatchConfig

# Editors and some tools leave these behind; they are never reported
BACKUP_SUFFIX = ".bck"

LITERAL_MARKER = "_"


def _as_posix(path: str | Path) -> str:
    if isinstance(path, Path):
        return path.as_posix()
    return path.replace("\\", "/")


def is_backup_file(path: str | Path) -> bool:
    """Check if path carries the reserved backup suffix."""
    return _as_posix(path).endswith(BACKUP_SUFFIX)


def matches_pattern(path: str | Path, pattern: str) -> bool:
    """
    Check a path against one file type pattern.

    A plain pattern is an extension: ``"log"`` matches ``app.log``.
    A pattern starting with ``_`` is a literal filename suffix:
    ``"_Makefile"`` matches ``Makefile`` and ``src/Makefile``.
    Both forms are tried.
    """
    path_str = _as_posix(path)
    if path_str.endswith("." + pattern):
        return True
    if pattern.startswith(LITERAL_MARKER) and len(pattern) > 1:
        return ("/" + path_str).endswith("/" + pattern[1:])
    return False


def matches_any_pattern(path: str | Path, patterns: Iterable[str]) -> bool:
    """Check if path matches at least one pattern."""
    return any(matches_pattern(path, pattern) for pattern in patterns)


class PathFilter:
    """Accepts or rejects file paths according to a WatchConfig."""

    def __init__(self, config: WatchConfig | None = None) -> None:
        config = config or WatchConfig()
        self._exclude = config.exclude_file_types
        self._include = config.include_file_types

    def accepts(self, path: str | Path) -> bool:
        """Return True if the file should be checked for modification."""
        if is_backup_file(path):
            return False
        if self._exclude:
            return not matches_any_pattern(path, self._exclude)
        if self._include:
            return matches_any_pattern(path, self._include)
        return True

    def __call__(self, path: str | Path) -> bool:
        return self.accepts(path)
