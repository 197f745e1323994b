"""Elapsed-time clock for an active workout session."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol


class SessionStatus(str, Enum):
    idle = "idle"
    in_progress = "in_progress"
    completed = "completed"


@dataclass(frozen=True)
class TimerSnapshot:
    status: SessionStatus
    start: float | None = None
    end: float | None = None


IDLE = TimerSnapshot(SessionStatus.idle)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class ThreadingScheduler:
    """Runs each callback on a daemon ``threading.Timer``."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        handle = threading.Timer(delay, callback)
        handle.daemon = True
        handle.start()
        return handle


def whole_seconds(start: float, end: float) -> int:
    return max(0, math.floor(end - start))


class SessionTimer:
    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        scheduler: Scheduler | None = None,
        interval: float = 1.0,
    ):
        self._clock = clock
        self._scheduler = scheduler or ThreadingScheduler()
        self._interval = interval
        self._lock = threading.RLock()
        self._snapshot = IDLE
        self._status = SessionStatus.idle
        self._elapsed = 0
        self._handle: Cancellable | None = None
        # bumped on every cancel so an already-fired tick is dropped
        self._generation = 0

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def snapshot(self) -> TimerSnapshot:
        return self._snapshot

    @property
    def ticking(self) -> bool:
        return self._handle is not None

    # ---- transitions ----

    def start(self, timestamp: float | None = None) -> None:
        with self._lock:
            start = self._clock() if timestamp is None else timestamp
            self._snapshot = TimerSnapshot(SessionStatus.in_progress, start, None)
            self._cancel_tick()
            self._status = SessionStatus.in_progress
            self._elapsed = whole_seconds(start, self._clock())
            self._schedule_tick()

    def finish(self, timestamp: float | None = None) -> None:
        with self._lock:
            start = self._snapshot.start
            if start is None:
                start = self._clock()
            end = self._clock() if timestamp is None else timestamp
            self._snapshot = TimerSnapshot(SessionStatus.completed, start, end)
            self._cancel_tick()
            self._status = SessionStatus.completed
            self._elapsed = whole_seconds(start, end)

    def reset(self) -> None:
        with self._lock:
            self._snapshot = IDLE
            self._cancel_tick()
            self._status = SessionStatus.idle
            self._elapsed = 0

    def sync(self, snapshot: TimerSnapshot) -> None:
        """Apply an externally stored state, doing nothing if it already matches."""
        with self._lock:
            normalized = self._normalize(snapshot)
            if normalized == self._snapshot:
                return
            if normalized.status is SessionStatus.idle:
                self.reset()
            elif normalized.status is SessionStatus.in_progress:
                self.start(normalized.start)
            else:
                self._snapshot = TimerSnapshot(SessionStatus.completed, normalized.start, None)
                self.finish(normalized.end)

    def tick(self) -> None:
        with self._lock:
            start = self._snapshot.start
            if self._status is SessionStatus.in_progress and start is not None:
                self._elapsed = whole_seconds(start, self._clock())

    # ---- internals ----

    def _normalize(self, snapshot: TimerSnapshot) -> TimerSnapshot:
        if snapshot.status is SessionStatus.idle or not snapshot.start:
            return IDLE
        if snapshot.status is SessionStatus.in_progress:
            return TimerSnapshot(SessionStatus.in_progress, snapshot.start, None)
        end = snapshot.end if snapshot.end is not None else self._clock()
        return TimerSnapshot(SessionStatus.completed, snapshot.start, end)

    def _schedule_tick(self) -> None:
        generation = self._generation
        self._handle = self._scheduler.call_later(self._interval, lambda: self._on_tick(generation))

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self.tick()
            self._schedule_tick()

    def _cancel_tick(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
