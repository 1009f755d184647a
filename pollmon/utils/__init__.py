"""
pollmon Utilities Package.

Settings and logging shared by the watcher modules.
Requires Python 3.11+.
"""

from pollmon.utils.config import Settings, get_settings
from pollmon.utils.logger import bind_watch_context, configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "bind_watch_context",
    "get_logger",
    "LoggerMixin",
]
