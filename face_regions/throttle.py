from __future__ import annotations
from typing import Callable, Optional

from .types import PipelineStatus


class RateLimiter:
    """Lets an action through at most once per interval.

    The first call always fires; afterwards a call fires only when strictly
    more than `interval_ms` has passed since the last one that fired.
    """

    def __init__(self, interval_ms: float = 1000.0):
        self.interval_ms = max(0.0, float(interval_ms))
        self._last_fire_ms: Optional[float] = None

    def try_fire(self, now_ms: float) -> bool:
        if self._last_fire_ms is not None and (now_ms - self._last_fire_ms) <= self.interval_ms:
            return False
        self._last_fire_ms = float(now_ms)
        return True

    def reset(self) -> None:
        self._last_fire_ms = None


class StatusTracker:
    """Edge-triggered status: listeners hear about a status only when it changes."""

    def __init__(self, on_change: Optional[Callable[[str], None]] = None,
                 initial: PipelineStatus = PipelineStatus.IDLE):
        self.on_change = on_change
        self._status = initial

    @property
    def status(self) -> PipelineStatus:
        return self._status

    def update(self, status: PipelineStatus) -> bool:
        """Record `status`; returns True if it differed from the previous one."""
        if status is self._status:
            return False
        self._status = status
        if self.on_change:
            self.on_change(status.message)
        return True
