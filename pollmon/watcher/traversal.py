"""
pollmon Traversal Engine.

Walks the watched tree and routes every file through the filter,
change detector and debounce gate.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from pollmon.utils.logger import LoggerMixin
from pollmon.watcher.change_detector import ChangeDetector
from pollmon.watcher.debouncer import DebounceGate
from pollmon.watcher.exceptions import DirectoryReadError
from pollmon.watcher.filters import PathFilter, is_backup_file
from pollmon.watcher.models import ChangeCandidate, PassStats, WatchConfig, WatchState

CHECKPOINT_FILES = 100


class TreeWalker(LoggerMixin):
    """
    Visits every file under a watch root in directory-listing order.

    Directories are expanded depth-first with an explicit stack of open
    listings, so a subdirectory is fully visited before the entries that
    follow it in its parent, without recursion.
    """

    def __init__(
        self,
        config: WatchConfig,
        path_filter: PathFilter | None = None,
        detector: ChangeDetector | None = None,
        gate: DebounceGate | None = None,
    ) -> None:
        """
        Initialize the walker.

        Args:
            config: Watch configuration (recursion, excluded directories)
            path_filter: Filter deciding which files are checked
            detector: Change detector comparing against the watermark
            gate: Debounce gate deciding which changes fire
        """
        self._config = config
        self._filter = path_filter or PathFilter(config)
        self._detector = detector or ChangeDetector(follow_symlinks=config.follow_symlinks)
        self._gate = gate or DebounceGate(delay=config.delay)
        self._stop_requested = False
        self.last_stats = PassStats()

    def stop(self) -> None:
        """Interrupt the current pass at the next entry."""
        self._stop_requested = True

    def is_excluded_dir(self, relative_dir: str) -> bool:
        """Check if a root-relative directory is configured as excluded."""
        return relative_dir in self._config.exclude_dirs

    def iter_entries(self, root: Path) -> Iterator[tuple[os.DirEntry, str, bool]]:
        """
        Yield ``(entry, relative_path, is_dir)`` for every visited entry.

        Excluded directories are yielded but not entered. Raises
        DirectoryReadError if a directory cannot be listed.
        """
        root_str = str(root)
        prefix = root_str if root_str.endswith(os.sep) else root_str + os.sep
        follow = self._config.follow_symlinks

        stack = [self._open_dir(root_str)]
        try:
            while stack and not self._stop_requested:
                listing, dir_path = stack[-1]
                try:
                    entry = next(listing, None)
                except OSError as e:
                    raise DirectoryReadError(Path(dir_path), str(e)) from e

                if entry is None:
                    stack.pop()[0].close()
                    continue

                try:
                    is_dir = entry.is_dir(follow_symlinks=follow)
                except OSError as e:
                    # Entry vanished between listing and inspection
                    self.log.debug("entry_skipped", path=entry.path, error=str(e))
                    continue

                relative_path = entry.path[len(prefix):].replace(os.sep, "/")
                yield entry, relative_path, is_dir

                if not is_dir:
                    continue
                if self.is_excluded_dir(relative_path):
                    self.log.debug("directory_excluded", path=relative_path)
                    continue
                if self._config.recursive:
                    stack.append(self._open_dir(entry.path))
        finally:
            for listing, _ in stack:
                listing.close()

    def iter_files(self, root: Path) -> Iterator[tuple[Path, str]]:
        """Yield ``(absolute_path, relative_path)`` for every visited file."""
        for entry, relative_path, is_dir in self.iter_entries(root):
            if not is_dir:
                yield Path(entry.path), relative_path

    def iter_steps(self, state: WatchState) -> Iterator[ChangeCandidate | None]:
        """
        Run one pass, yielding admitted changes and ``None`` checkpoints.

        A checkpoint is yielded at every directory and every
        CHECKPOINT_FILES files, so an event-loop consumer can hand control
        to other tasks in the middle of a pass.
        """
        self._stop_requested = False
        stats = PassStats()
        self.last_stats = stats

        for entry, relative_path, is_dir in self.iter_entries(state.root):
            if is_dir:
                stats.directories += 1
                if self.is_excluded_dir(relative_path):
                    stats.excluded_dirs.append(relative_path)
                yield None
                continue

            stats.files += 1
            if stats.files % CHECKPOINT_FILES == 0:
                yield None
            if is_backup_file(relative_path) or not self._filter.accepts(entry.path):
                stats.filtered += 1
                continue

            candidate = self._detector.detect(Path(entry.path), state, relative_path)
            if candidate is None:
                continue
            stats.changed += 1

            if self._gate.admit(candidate, state):
                stats.fired += 1
                yield candidate

    def iter_changes(self, state: WatchState) -> Iterator[ChangeCandidate]:
        """
        Run one pass and yield each change admitted by the gate.

        The pass is suspended while the consumer handles a yielded change,
        so a callback always finishes before the next file is examined.
        """
        for step in self.iter_steps(state):
            if step is not None:
                yield step

    def walk(self, state: WatchState, callback: Callable[[str], Any]) -> PassStats:
        """
        Run one pass, invoking ``callback`` with the relative path of each admitted change.

        Returns:
            Counters for the pass
        """
        for candidate in self.iter_changes(state):
            self.log.debug("callback_invoked", path=candidate.relative_path)
            callback(candidate.relative_path)
        return self.last_stats

    @staticmethod
    def _open_dir(path: str) -> tuple[Any, str]:
        try:
            return os.scandir(path), path
        except OSError as e:
            raise DirectoryReadError(Path(path), str(e)) from e
