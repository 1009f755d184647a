"""
pollmon File Watcher.

Polling watch loop: repeatedly traverses a directory tree and calls back
on modified files.
Requires Python 3.11+.
"""

import asyncio
import inspect
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pollmon.utils.logger import LoggerMixin, bind_watch_context
from pollmon.watcher.change_detector import ChangeDetector
from pollmon.watcher.debouncer import DebounceGate
from pollmon.watcher.exceptions import WatchConfigError
from pollmon.watcher.filters import PathFilter
from pollmon.watcher.models import PassStats, WatchConfig, WatchState
from pollmon.watcher.traversal import TreeWalker

ChangeCallback = Callable[[str | None], Any]


def resolve_config(config: WatchConfig | Mapping[str, Any] | None) -> WatchConfig:
    """
    Build a WatchConfig from a model, a mapping or None.

    Raises:
        WatchConfigError: If the configuration is invalid
    """
    if config is None:
        return WatchConfig()
    if isinstance(config, WatchConfig):
        return config
    if not isinstance(config, Mapping):
        raise WatchConfigError(f"config must be a WatchConfig or a mapping, got {type(config).__name__}")
    try:
        return WatchConfig.model_validate(dict(config))
    except ValidationError as e:
        raise WatchConfigError(str(e)) from e


def resolve_root(root: str | Path | None) -> Path:
    """
    Validate the watch root, defaulting to the current directory.

    Raises:
        WatchConfigError: If the root is relative or not a directory
    """
    if root is None:
        return Path.cwd()
    if not isinstance(root, (str, Path)):
        raise WatchConfigError(f"root must be a path, got {type(root).__name__}")
    path = Path(root)
    if not path.is_absolute():
        raise WatchConfigError(f"Directory must be an absolute path: '{root}'")
    if not path.is_dir():
        raise WatchConfigError(f"Directory does not exist: '{root}'")
    return path


class PollingWatcher(LoggerMixin):
    """
    Watches a directory tree by polling modification times.

    The callback is called once with None when watching starts, then with
    the root-relative path of every change the debounce gate admits.
    Everything runs on the calling thread; the callback blocks the next
    file check until it returns.
    """

    def __init__(
        self,
        root: str | Path | None,
        callback: ChangeCallback,
        config: WatchConfig | Mapping[str, Any] | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            root: Absolute directory to watch, or None for the current directory
            callback: Called with None at startup, then with each changed path
            config: Watch configuration
            clock: Function returning the current time in seconds
            sleep: Function pausing between passes

        Raises:
            WatchConfigError: If root or config is invalid
        """
        if not callable(callback):
            raise WatchConfigError("callback must be callable")

        self._root = resolve_root(root)
        self._config = resolve_config(config)
        self._callback = callback
        self._clock = clock
        self._sleep = sleep

        self._gate = DebounceGate(delay=self._config.delay, clock=clock)
        self._walker = TreeWalker(
            self._config,
            path_filter=PathFilter(self._config),
            detector=ChangeDetector(follow_symlinks=self._config.follow_symlinks),
            gate=self._gate,
        )
        self._state: WatchState | None = None
        self._running = False

    def _open_session(self) -> tuple[WatchState, bool]:
        """Create the session state on first use. Returns (state, created)."""
        if self._state is not None:
            return self._state, False

        self._state = WatchState.started_at(self._root, self._clock())
        self._gate.start(self._state)
        self._running = True

        self.log.info(
            "watch_started",
            path=str(self._root),
            recursive=self._config.recursive,
            delay=self._config.delay,
            poll_interval=self._config.poll_interval,
        )
        return self._state, True

    def start(self) -> WatchState:
        """Open the session and send the startup signal."""
        state, created = self._open_session()
        if created:
            self._callback(None)
        return state

    def run_pass(self) -> PassStats:
        """Run a single traversal pass."""
        state = self.start()
        stats = self._walker.walk(state, self._callback)
        state.passes += 1
        self.log.debug(
            "pass_completed",
            passes=state.passes,
            files=stats.files,
            changed=stats.changed,
            fired=stats.fired,
        )
        return stats

    def run(self, max_passes: int | None = None) -> WatchState:
        """
        Poll until stopped.

        Args:
            max_passes: Stop after this many passes; None polls forever

        Returns:
            The session state when the loop ends
        """
        with bind_watch_context(self._root):
            state = self.start()
            # A session stopped by an earlier run resumes with its watermark intact
            self._running = True
            completed = 0
            try:
                while self._running:
                    self.run_pass()
                    completed += 1
                    if max_passes is not None and completed >= max_passes:
                        break
                    if self._running and self._config.poll_interval > 0:
                        self._sleep(self._config.poll_interval)
            finally:
                self._running = False
                self.log.info("watch_stopped", passes=state.passes, invocations=state.invocations)
        return state

    async def run_async(self, max_passes: int | None = None) -> WatchState:
        """
        Poll until stopped, pausing with asyncio.sleep between passes.

        Control returns to the event loop at every directory of a pass,
        so concurrent watches and other tasks keep running. Coroutine
        callbacks are awaited before the pass continues.
        """
        with bind_watch_context(self._root):
            state, created = self._open_session()
            if created:
                await self._maybe_await(self._callback(None))
            self._running = True
            completed = 0
            try:
                while self._running:
                    for step in self._walker.iter_steps(state):
                        if step is None:
                            await asyncio.sleep(0)
                            continue
                        self.log.debug("callback_invoked", path=step.relative_path)
                        await self._maybe_await(self._callback(step.relative_path))
                    state.passes += 1
                    completed += 1
                    if max_passes is not None and completed >= max_passes:
                        break
                    if self._running:
                        await asyncio.sleep(self._config.poll_interval)
            finally:
                self._running = False
                self.log.info("watch_stopped", passes=state.passes, invocations=state.invocations)
        return state

    def stop(self) -> None:
        """Stop polling after the current directory entry."""
        self._running = False
        self._walker.stop()

    @staticmethod
    async def _maybe_await(result: Any) -> Any:
        if inspect.isawaitable(result):
            return await result
        return result

    @property
    def root(self) -> Path:
        """Watched directory."""
        return self._root

    @property
    def config(self) -> WatchConfig:
        """Active configuration."""
        return self._config

    @property
    def state(self) -> WatchState | None:
        """Session state, None before start."""
        return self._state

    @property
    def last_stats(self) -> PassStats:
        """Counters of the current or most recent pass."""
        return self._walker.last_stats

    @property
    def is_running(self) -> bool:
        """Check if the watcher is polling."""
        return self._running

    def __enter__(self) -> "PollingWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()


def watch(
    root: str | Path | None,
    callback: ChangeCallback,
    config: WatchConfig | Mapping[str, Any] | None = None,
    *,
    max_passes: int | None = None,
) -> WatchState:
    """
    Watch a directory and call ``callback`` on every admitted change.

    Blocks until interrupted (or until ``max_passes`` passes have run).

    Usage:
        watch("/abs/project", lambda path: print(path or "watching"),
              {"exclude_file_types": ["log"], "exclude_dirs": ["build"], "delay": 4})
    """
    watcher = PollingWatcher(root, callback, config)
    return watcher.run(max_passes=max_passes)


async def async_watch(
    root: str | Path | None,
    callback: ChangeCallback,
    config: WatchConfig | Mapping[str, Any] | None = None,
    *,
    max_passes: int | None = None,
) -> WatchState:
    """
    Coroutine variant of ``watch`` for event-loop hosts.

    Each call owns its own session state, so several roots can be
    watched at once with ``asyncio.gather``.
    """
    watcher = PollingWatcher(root, callback, config)
    return await watcher.run_async(max_passes=max_passes)
