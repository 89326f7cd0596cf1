"""
Animation driver.

Advances the controller's current day over wall-clock time so that one full
orbit always takes ``orbit_duration_ms``, whatever the number of days. The
driver never owns a loop: each step asks a ``FrameScheduler`` for the next
frame, and the time source is injected, so tests can drive it with synthetic
timestamps.
"""

import itertools
import logging
import math
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .config import config

if TYPE_CHECKING:
    from .controller import ObliquityController

logger = logging.getLogger(__name__)


class DriverState(Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'


class FrameScheduler(ABC):
    """Frame-presentation capability: runs a callback on the next frame."""

    @abstractmethod
    def request(self, callback: Callable[[], None]) -> int:
        """Schedule ``callback`` for the next frame and return a token."""

    @abstractmethod
    def cancel(self, token: int) -> None:
        """Cancel a scheduled callback. Unknown tokens are ignored."""


class ManualFrameScheduler(FrameScheduler):
    """
    Scheduler whose frames are produced by calling ``tick()``.

    Callbacks requested while a tick is running wait for the next tick.
    """

    def __init__(self):
        self._pending: Dict[int, Callable[[], None]] = {}
        self._tokens = itertools.count(1)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, callback: Callable[[], None]) -> int:
        token = next(self._tokens)
        self._pending[token] = callback
        return token

    def cancel(self, token: int) -> None:
        self._pending.pop(token, None)

    def tick(self) -> int:
        """Run every callback pending at call time; return how many ran."""
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback()
        return len(due)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class AnimationDriver:
    """
    Two-state (STOPPED / RUNNING) driver of the controller's current day.

    Parameters
    ----------
    controller : ObliquityController
        Controller whose current day is advanced
    scheduler : FrameScheduler
        Source of frames
    time_source : callable, optional
        Returns the current time in milliseconds (default: monotonic clock)
    orbit_duration_ms : float, optional
        Wall-clock duration of one orbit (default: config.ORBIT_DURATION_MS)
    """

    def __init__(self, controller: "ObliquityController",
                 scheduler: FrameScheduler,
                 time_source: Optional[Callable[[], float]] = None,
                 orbit_duration_ms: Optional[float] = None):
        if orbit_duration_ms is None:
            orbit_duration_ms = config.ORBIT_DURATION_MS
        if orbit_duration_ms <= 0:
            raise ValueError(f"Orbit duration must be positive, got {orbit_duration_ms}")
        self._controller = controller
        self._scheduler = scheduler
        self._time_source = time_source or _monotonic_ms
        self._orbit_duration = float(orbit_duration_ms)
        self._state = DriverState.STOPPED
        self._start_time = 0.0
        self._start_day = 0
        self._token: Optional[int] = None
        self._run_id = 0
        self._listeners: List[Callable[[int], None]] = []

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is DriverState.RUNNING

    @property
    def orbit_duration_ms(self) -> float:
        return self._orbit_duration

    def bind(self, callback: Callable[[int], None]):
        """Register a display element to receive every day the driver sets."""
        self._listeners.append(callback)
        return callback

    def start(self) -> None:
        if self._state is DriverState.RUNNING:
            return
        self._state = DriverState.RUNNING
        self._run_id += 1
        self._start_time = self._time_source()
        self._start_day = self._controller.current_day
        logger.info("Animation started at day %d", self._start_day)
        self._step(self._run_id)

    def stop(self) -> None:
        if self._state is DriverState.STOPPED:
            return
        self._state = DriverState.STOPPED
        if self._token is not None:
            self._scheduler.cancel(self._token)
            self._token = None
        logger.info("Animation stopped at day %d", self._controller.current_day)

    def day_at(self, now: float) -> int:
        """Day shown at time ``now`` [ms] for the current run."""
        n = self._controller.num_days
        elapsed = now - self._start_time
        progress = (elapsed % self._orbit_duration) / self._orbit_duration
        return int(math.floor((self._start_day + progress * n) % n))

    def _step(self, run_id: int) -> None:
        # a step from an earlier run (stopped, maybe restarted) must not act
        if self._state is not DriverState.RUNNING or run_id != self._run_id:
            return
        self._token = None

        day = self.day_at(self._time_source())
        if day != self._controller.current_day:
            self._controller.set_current_day(day)
            for listener in self._listeners:
                listener(day)
            # a listener may have stopped (or restarted) the driver
            if self._state is not DriverState.RUNNING or run_id != self._run_id:
                return

        self._token = self._scheduler.request(lambda: self._step(run_id))

    def __repr__(self):
        return (f"AnimationDriver(state={self._state.value}, "
                f"orbit_duration_ms={self._orbit_duration})")
