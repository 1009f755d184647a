"""
pollmon Watcher Package.

Polling-based directory monitoring with watermark change detection.
Requires Python 3.11+.
"""

from pollmon.watcher.change_detector import ChangeDetector
from pollmon.watcher.debouncer import DebounceGate
from pollmon.watcher.exceptions import DirectoryReadError, WatchConfigError, WatcherError
from pollmon.watcher.file_watcher import PollingWatcher, async_watch, watch
from pollmon.watcher.filters import BACKUP_SUFFIX, PathFilter, is_backup_file, matches_any_pattern
from pollmon.watcher.models import ChangeCandidate, PassStats, WatchConfig, WatchState
from pollmon.watcher.traversal import TreeWalker

__all__ = [
    "PollingWatcher",
    "watch",
    "async_watch",
    "WatchConfig",
    "WatchState",
    "ChangeCandidate",
    "PassStats",
    "PathFilter",
    "BACKUP_SUFFIX",
    "is_backup_file",
    "matches_any_pattern",
    "ChangeDetector",
    "DebounceGate",
    "TreeWalker",
    "WatcherError",
    "WatchConfigError",
    "DirectoryReadError",
]
