"""Application-scoped owner of session timers and mounted controllers."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Callable

from gymii.training.controller import SessionBackend, SessionSummary, WorkoutSessionController
from gymii.training.errors import LeaveConfirmationRequired
from gymii.training.snapshots import (
    DEFAULT_RESUME_WINDOW,
    KeyValueStore,
    StoredSessionEntry,
    clear_stored_session,
    find_latest_active_session,
    storage_key,
)
from gymii.training.state import SessionExercise
from gymii.training.timer import Scheduler, SessionStatus, SessionTimer, ThreadingScheduler

log = logging.getLogger(__name__)


class SessionManager:
    """Keeps one timer per user and at most one mounted session per user.

    Mounting a session for a different workout unmounts the previous one
    (once confirmed when it is still in progress),
    the same way opening another page would: its timer is reset and its
    snapshot is left in the store for a later resume.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Callable[[], float] = time.time,
        scheduler: Scheduler | None = None,
        tick_interval: float = 1.0,
    ):
        self.store = store
        self.clock = clock
        self.scheduler = scheduler or ThreadingScheduler()
        self.tick_interval = tick_interval
        self._lock = threading.RLock()
        self._timers: dict[int, SessionTimer] = {}
        self._mounted: dict[int, WorkoutSessionController] = {}

    def timer_for(self, user_id: int) -> SessionTimer:
        with self._lock:
            timer = self._timers.get(user_id)
            if timer is None:
                timer = SessionTimer(clock=self.clock, scheduler=self.scheduler, interval=self.tick_interval)
                self._timers[user_id] = timer
            return timer

    def mounted(self, user_id: int, workout_id: int) -> WorkoutSessionController | None:
        with self._lock:
            controller = self._mounted.get(user_id)
            if controller is not None and controller.workout_id == workout_id:
                return controller
            return None

    def attach(
        self,
        user_id: int,
        workout_id: int,
        workout_name: str | None,
        exercises: list[SessionExercise],
        *,
        confirm_leave: bool = False,
    ) -> WorkoutSessionController:
        """Mount the session of a workout, reloading it when its exercises changed.

        Mounting another workout while the current one is in progress needs
        ``confirm_leave``, the same as leaving it explicitly.
        """
        with self._lock:
            current = self._mounted.get(user_id)
            if current is not None:
                if current.workout_id == workout_id:
                    if not self._is_stale(current, workout_name, exercises):
                        return current
                    log.info("Reloading workout session user=%s workout=%s after edits", user_id, workout_id)
                elif current.status is SessionStatus.in_progress and not confirm_leave:
                    raise LeaveConfirmationRequired()
                self._detach(current)

            controller = WorkoutSessionController(
                user_id=user_id,
                workout_id=workout_id,
                workout_name=workout_name,
                exercises=exercises,
                timer=self.timer_for(user_id),
                store=self.store,
                clock=self.clock,
                scheduler=self.scheduler,
                tick_interval=self.tick_interval,
            )
            controller.mount()
            self._mounted[user_id] = controller
            log.info("Mounted workout session user=%s workout=%s status=%s",
                     user_id, workout_id, controller.status.value)
            return controller

    def refresh(
        self,
        user_id: int,
        workout_id: int,
        workout_name: str | None,
        exercises: list[SessionExercise],
    ) -> None:
        """Reload a mounted session after its workout or exercises were edited."""
        with self._lock:
            if self.mounted(user_id, workout_id) is not None:
                self.attach(user_id, workout_id, workout_name, exercises)

    def leave(self, user_id: int, workout_id: int, *, confirm: bool = False) -> None:
        with self._lock:
            controller = self.mounted(user_id, workout_id)
            if controller is None:
                return
            if controller.status is SessionStatus.in_progress and not confirm:
                raise LeaveConfirmationRequired()
            self._detach(controller)

    def finalize(
        self,
        user_id: int,
        workout_id: int,
        backend: SessionBackend,
        *,
        confirm: bool = False,
    ) -> SessionSummary | None:
        controller = self.mounted(user_id, workout_id)
        if controller is None:
            return None
        summary = controller.finalize(backend, confirm=confirm)
        with self._lock:
            self._detach(controller)
        log.info("Finished workout session user=%s workout=%s sets=%s/%s volume=%.1f",
                 user_id, workout_id, summary.completed_sets, summary.total_sets, summary.volume)
        return summary

    def discard(self, user_id: int, workout_id: int) -> None:
        with self._lock:
            controller = self.mounted(user_id, workout_id)
            if controller is not None:
                controller.abandon()
                self._detach(controller)
            else:
                clear_stored_session(self.store, storage_key(user_id, workout_id))

    def find_resumable(
        self, user_id: int, max_age: timedelta = DEFAULT_RESUME_WINDOW
    ) -> StoredSessionEntry | None:
        return find_latest_active_session(self.store, user_id, max_age=max_age, now=self.clock())

    def _detach(self, controller: WorkoutSessionController) -> None:
        controller.unmount()
        self.timer_for(controller.user_id).reset()
        if self._mounted.get(controller.user_id) is controller:
            del self._mounted[controller.user_id]

    @staticmethod
    def _is_stale(
        controller: WorkoutSessionController,
        workout_name: str | None,
        exercises: list[SessionExercise],
    ) -> bool:
        # keep the mounted copy while a set is being written
        if controller.busy():
            return False
        fresh = sorted(exercises, key=lambda e: e.order_index)
        return controller.workout_name != workout_name or controller.exercises != fresh
