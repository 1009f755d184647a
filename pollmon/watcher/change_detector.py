"""
pollmon Change Detector.

Detects modified files by comparing their modification time against
the session watermark.
Requires Python 3.11+.
"""

import os
from pathlib import Path

from pollmon.utils.logger import LoggerMixin
from pollmon.watcher.models import ChangeCandidate, WatchState


class ChangeDetector(LoggerMixin):
    """
    Reports files whose modification time is newer than the watermark.

    Every reported change advances the watermark, so a file is only
    reported once per modification and older files later in the same
    pass are not reported at all.
    """

    def __init__(self, follow_symlinks: bool = True) -> None:
        """
        Initialize the change detector.

        Args:
            follow_symlinks: Whether to stat the target of symbolic links
        """
        self._follow_symlinks = follow_symlinks
        self._changed_count = 0
        self._skipped_count = 0

    def detect(
        self,
        path: Path,
        state: WatchState,
        relative_path: str | None = None,
    ) -> ChangeCandidate | None:
        """
        Check a single file against the watermark.

        Args:
            path: Absolute path to the file
            state: Session state holding the watermark
            relative_path: Path relative to the watch root, computed if omitted

        Returns:
            ChangeCandidate if the file advanced the watermark, otherwise None
        """
        try:
            mtime = os.stat(path, follow_symlinks=self._follow_symlinks).st_mtime
        except OSError as e:
            # Vanished or unreadable files count as unchanged
            self._skipped_count += 1
            self.log.debug("file_stat_skipped", path=str(path), error=str(e))
            return None

        if not state.advance(mtime):
            return None

        if relative_path is None:
            relative_path = path.relative_to(state.root).as_posix()

        self._changed_count += 1
        candidate = ChangeCandidate(path=path, relative_path=relative_path, mtime=mtime)
        self.log.info("file_modified", path=relative_path, mtime=mtime)
        return candidate

    @property
    def changed_count(self) -> int:
        """Number of changes reported so far."""
        return self._changed_count

    @property
    def skipped_count(self) -> int:
        """Number of files that could not be stat'ed."""
        return self._skipped_count
