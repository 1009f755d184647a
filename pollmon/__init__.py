"""
pollmon: polling file watcher for build tools and hot reload.

Usage:
    from pollmon import watch

    def on_change(changed_file):
        if changed_file:
            print(f"{changed_file} has changed")

    watch(None, on_change, {"exclude_file_types": ["log", "_temp.lua"],
                            "exclude_dirs": ["build", "vendor"],
                            "delay": 4})

Requires Python 3.11+.
"""

from pollmon.utils.config import Settings, get_settings
from pollmon.utils.logger import configure_logging, get_logger
from pollmon.watcher import (
    BACKUP_SUFFIX,
    ChangeCandidate,
    ChangeDetector,
    DebounceGate,
    DirectoryReadError,
    PassStats,
    PathFilter,
    PollingWatcher,
    TreeWalker,
    WatchConfig,
    WatchConfigError,
    WatcherError,
    WatchState,
    async_watch,
    watch,
)

__all__ = [
    "watch",
    "async_watch",
    "PollingWatcher",
    "WatchConfig",
    "WatchState",
    "ChangeCandidate",
    "PassStats",
    "PathFilter",
    "ChangeDetector",
    "DebounceGate",
    "TreeWalker",
    "BACKUP_SUFFIX",
    "WatcherError",
    "WatchConfigError",
    "DirectoryReadError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"
