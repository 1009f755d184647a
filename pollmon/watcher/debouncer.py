"""
pollmon Debounce Gate.

Drops changes that arrive too soon after the previous callback.
Requires Python 3.11+.
"""

import time
from collections.abc import Callable

from pollmon.utils.logger import LoggerMixin
from pollmon.watcher.models import ChangeCandidate, WatchState


class DebounceGate(LoggerMixin):
    """
    Admits a change only if ``delay`` seconds passed since the last invocation.

    Unlike a trailing-edge debouncer nothing is queued: a change that
    arrives inside the cooldown window is consumed and never retried.
    """

    def __init__(
        self,
        delay: float = 2.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the gate.

        Args:
            delay: Cooldown in seconds between two callback invocations
            clock: Function returning the current time in seconds
        """
        self._delay = delay
        self._clock = clock
        self._dropped_count = 0

    def start(self, state: WatchState) -> None:
        """Record the startup invocation, which opens the first cooldown window."""
        state.last_invocation = self._clock()
        state.invocations += 1

    def admit(self, candidate: ChangeCandidate, state: WatchState) -> bool:
        """
        Decide whether a change fires the callback.

        Args:
            candidate: The detected change
            state: Session state holding the last invocation time

        Returns:
            True if the callback should be invoked
        """
        now = self._clock()
        elapsed = now - state.last_invocation
        if elapsed >= self._delay:
            state.last_invocation = now
            state.invocations += 1
            return True

        self._dropped_count += 1
        self.log.debug(
            "change_debounced",
            path=candidate.relative_path,
            elapsed=round(elapsed, 3),
            delay=self._delay,
        )
        return False

    @property
    def delay(self) -> float:
        """Cooldown in seconds."""
        return self._delay

    @property
    def dropped_count(self) -> int:
        """Number of changes dropped inside the cooldown window."""
        return self._dropped_count
