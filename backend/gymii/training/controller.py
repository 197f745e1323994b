"""Interactive execution of one workout session.

The controller owns the per-exercise progress, weight overrides and rest
timers of a single (user, workout) session. It is mounted by the
:class:`~gymii.training.manager.SessionManager`, hydrates itself from the
snapshot store once, and afterwards only writes snapshots.

Set completion is a two-phase update: the completed count is bumped and
snapshotted before the log row is written, and rolled back if the write
fails. A per-exercise ``saving`` guard drops duplicate requests while a
write is in flight.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Protocol

from pydantic import ValidationError

from gymii.training.errors import (
    ConfirmationRequired,
    ExerciseAlreadyFinished,
    ExerciseNotFound,
    SessionBackendError,
    SessionNotStarted,
    SessionStateError,
    SetLogFailed,
)
from gymii.training.snapshots import (
    SESSION_STORAGE_VERSION,
    KeyValueStore,
    RestTimerPayload,
    SessionSnapshot,
    clear_stored_session,
    restore_state,
    storage_key,
)
from gymii.training.state import RestTimerState, SessionExercise, round_weight
from gymii.training.timer import Cancellable, Scheduler, SessionStatus, SessionTimer, TimerSnapshot

log = logging.getLogger(__name__)


class SessionBackend(Protocol):
    def insert_log(self, *, exercise_id: int, user_id: int, weight: float, reps: int) -> None: ...

    def update_exercise_weight(self, exercise_id: int, weight: float) -> None: ...


@dataclass(frozen=True)
class ExerciseProgress:
    id: int
    name: str
    order_index: int
    sets: int
    completed_sets: int
    reps: int
    next_reps: int | None
    weight: float
    default_weight: float
    rest_seconds: int
    rest: RestTimerState
    saving: bool
    finished: bool


@dataclass(frozen=True)
class SessionState:
    workout_id: int
    workout_name: str | None
    status: SessionStatus
    elapsed_seconds: int
    session_start: float | None
    session_end: float | None
    volume: float
    total_sets: int
    completed_sets: int
    percentage: int
    total_exercises: int
    completed_exercises: int
    pending_sets: int
    workout_finished: bool
    active_exercise_id: int | None
    focus_exercise_id: int | None
    exercises: list[ExerciseProgress]


@dataclass(frozen=True)
class SessionSummary:
    workout_id: int
    duration_seconds: int
    volume: float
    completed_sets: int
    total_sets: int


class WorkoutSessionController:
    def __init__(
        self,
        *,
        user_id: int,
        workout_id: int,
        workout_name: str | None,
        exercises: list[SessionExercise],
        timer: SessionTimer,
        store: KeyValueStore,
        clock: Callable[[], float],
        scheduler: Scheduler,
        tick_interval: float = 1.0,
    ):
        self.user_id = user_id
        self.workout_id = workout_id
        self.workout_name = workout_name
        self.exercises = sorted(exercises, key=lambda e: e.order_index)
        self.timer = timer
        self.store = store
        self.key = storage_key(user_id, workout_id)
        self._clock = clock
        self._scheduler = scheduler
        self._tick_interval = tick_interval
        self._lock = threading.RLock()

        self.status = SessionStatus.idle
        self.session_start: float | None = None
        self.session_end: float | None = None
        self.volume = 0.0
        self.progress = {e.id: 0 for e in self.exercises}
        self.weight_overrides = {e.id: e.default_weight for e in self.exercises}
        self.rest_timers = {e.id: RestTimerState.create(e.rest_seconds) for e in self.exercises}
        self.active_exercise_id: int | None = None
        self.saving: set[int] = set()
        self.hydrated = False
        self.mounted = False

        self._last_rest_tick = clock()
        self._rest_handle: Cancellable | None = None
        self._rest_generation = 0

    # ---- lifecycle ----

    def mount(self) -> None:
        with self._lock:
            self._hydrate()
            self.timer.sync(TimerSnapshot(self.status, self.session_start, self.session_end))
            self.mounted = True
            self._last_rest_tick = self._clock()
            self._schedule_rest_tick()

    def unmount(self) -> None:
        with self._lock:
            self.mounted = False
            self._rest_generation += 1
            if self._rest_handle is not None:
                self._rest_handle.cancel()
                self._rest_handle = None

    def _hydrate(self) -> None:
        if self.hydrated:
            return
        self.hydrated = True
        try:
            raw = self.store.get(self.key)
        except (UnicodeDecodeError, OSError):
            log.error("Failed to read workout session state %s", self.key, exc_info=True)
            clear_stored_session(self.store, self.key)
            return
        if not raw:
            return
        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValidationError:
            log.error("Failed to restore workout session state %s", self.key, exc_info=True)
            clear_stored_session(self.store, self.key)
            return
        if (
            snapshot.version != SESSION_STORAGE_VERSION
            or snapshot.user_id != self.user_id
            or snapshot.workout_id != self.workout_id
        ):
            log.info("Discarding session snapshot %s from another context", self.key)
            clear_stored_session(self.store, self.key)
            return

        restored = restore_state(snapshot, self.exercises, self._clock())
        self.status = restored.status
        self.session_start = restored.session_start
        self.session_end = restored.session_end
        self.volume = restored.session_volume
        self.progress = restored.progress
        self.weight_overrides = restored.weight_overrides
        self.rest_timers = restored.rest_timers
        self.active_exercise_id = restored.active_exercise_id
        self._release_finished_focus()

    # ---- persistence ----

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            version=SESSION_STORAGE_VERSION,
            user_id=self.user_id,
            workout_id=self.workout_id,
            workout_name=self.workout_name,
            session_status=self.status,
            session_start=self.session_start,
            session_end=self.session_end,
            session_volume=self.volume,
            progress=dict(self.progress),
            weight_overrides=dict(self.weight_overrides),
            rest_timers={
                exercise_id: RestTimerPayload(
                    duration=timer.duration, remaining=timer.remaining, active=timer.active
                )
                for exercise_id, timer in self.rest_timers.items()
            },
            last_updated=self._clock(),
            active_exercise_id=self.active_exercise_id,
        )

    def _persist(self) -> None:
        if not self.hydrated or self.session_start is None:
            return
        try:
            self.store.set(self.key, self.to_snapshot().model_dump_json())
        except OSError:
            log.warning("Could not save the workout in progress (%s)", self.key, exc_info=True)

    # ---- queries ----

    def busy(self) -> bool:
        with self._lock:
            return bool(self.saving)

    def exercise(self, exercise_id: int) -> SessionExercise:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        raise ExerciseNotFound()

    def completed(self, exercise: SessionExercise) -> int:
        return min(self.progress.get(exercise.id, 0), exercise.sets)

    def is_finished(self, exercise: SessionExercise) -> bool:
        return self.progress.get(exercise.id, 0) >= exercise.sets

    @property
    def total_sets(self) -> int:
        return sum(e.sets for e in self.exercises)

    @property
    def completed_sets(self) -> int:
        return sum(self.completed(e) for e in self.exercises)

    @property
    def completed_exercises(self) -> int:
        return sum(1 for e in self.exercises if self.is_finished(e))

    @property
    def next_exercise(self) -> SessionExercise | None:
        for exercise in self.exercises:
            if not self.is_finished(exercise):
                return exercise
        return None

    @property
    def workout_finished(self) -> bool:
        return bool(self.exercises) and self.next_exercise is None

    @property
    def focus_exercise(self) -> SessionExercise | None:
        if self.status is not SessionStatus.in_progress:
            return None
        if self.active_exercise_id is not None:
            for exercise in self.exercises:
                if exercise.id == self.active_exercise_id:
                    return exercise
        return self.next_exercise

    def resolve_weight(self, exercise: SessionExercise) -> float:
        value = self.weight_overrides.get(exercise.id)
        if value is not None and not math.isnan(value) and value >= 0:
            return value
        return exercise.weight

    # ---- operations ----

    def start(self) -> None:
        with self._lock:
            if self.status is not SessionStatus.idle:
                raise SessionStateError("Workout session already started")
            if not self.exercises:
                raise SessionStateError("Workout has no exercises")
            start = self._clock()
            self.session_start = start
            self.session_end = None
            self.status = SessionStatus.in_progress
            self.timer.start(start)
            self._persist()

    def complete_set(self, exercise_id: int, backend: SessionBackend) -> bool:
        """Log the next set of an exercise.

        Returns False when the request is ignored because the exercise is
        already complete or a previous set for it is still being saved.
        """
        with self._lock:
            exercise = self.exercise(exercise_id)
            if self.status is not SessionStatus.in_progress:
                raise SessionNotStarted()
            current = self.progress.get(exercise_id, 0)
            if current >= exercise.sets or exercise_id in self.saving:
                return False

            next_count = current + 1
            weight = self.resolve_weight(exercise)
            reps = exercise.reps_for(current)
            self.progress[exercise_id] = next_count
            self.saving.add(exercise_id)
            self._persist()

        try:
            backend.insert_log(exercise_id=exercise_id, user_id=self.user_id, weight=weight, reps=reps)
        except SessionBackendError as exc:
            with self._lock:
                self.saving.discard(exercise_id)
                self.progress[exercise_id] = current
                self._persist()
            raise SetLogFailed() from exc

        with self._lock:
            self.saving.discard(exercise_id)
            self.volume += weight * reps
            timer = self.rest_timers.get(exercise_id) or RestTimerState.create(exercise.rest_seconds)
            if next_count < exercise.sets:
                self.rest_timers[exercise_id] = timer.start()
                upcoming = exercise.plan_entry(next_count)
                if upcoming is not None and upcoming.weight is not None:
                    self.weight_overrides[exercise_id] = upcoming.weight
            else:
                self.rest_timers[exercise_id] = timer.stop()
            self._release_finished_focus()
            self._persist()

        self._save_exercise_weight(exercise, weight, backend)
        return True

    def set_weight(self, exercise_id: int, value: float | None) -> float:
        """Override the working weight; ``None`` restores the planned weight."""
        with self._lock:
            exercise = self.exercise(exercise_id)
            if value is None:
                self.weight_overrides[exercise_id] = exercise.default_weight
            elif not math.isnan(value):
                self.weight_overrides[exercise_id] = round_weight(value)
            self._persist()
            return self.weight_overrides[exercise_id]

    def adjust_weight(self, exercise_id: int, delta: float) -> float:
        with self._lock:
            exercise = self.exercise(exercise_id)
            current = self.weight_overrides.get(exercise_id)
            if current is None or math.isnan(current):
                current = exercise.default_weight
            self.weight_overrides[exercise_id] = round_weight(current + delta)
            self._persist()
            return self.weight_overrides[exercise_id]

    def select_exercise(self, exercise_id: int | None) -> None:
        with self._lock:
            if exercise_id is not None:
                exercise = self.exercise(exercise_id)
                if self.is_finished(exercise):
                    raise ExerciseAlreadyFinished()
            self.active_exercise_id = exercise_id
            self._persist()

    def tick_rest_timers(self) -> None:
        """Advance every active rest timer by the whole seconds since the last tick."""
        with self._lock:
            now = self._clock()
            diff = now - self._last_rest_tick
            if diff < 1:
                return
            self._last_rest_tick = now
            self._advance_rest_timers(math.floor(diff))

    def catch_up(self) -> None:
        # the scheduler may have been starved while nobody was looking
        self.tick_rest_timers()

    def finalize(self, backend: SessionBackend, *, confirm: bool = False) -> SessionSummary:
        with self._lock:
            if self.status is SessionStatus.idle:
                raise SessionNotStarted()
            if not self.workout_finished and not confirm:
                raise ConfirmationRequired(
                    pending_sets=max(0, self.total_sets - self.completed_sets),
                    pending_exercises=max(0, len(self.exercises) - self.completed_exercises),
                )
            pending = []
            for exercise in self.exercises:
                override = self.weight_overrides.get(exercise.id)
                if override is None or math.isnan(override):
                    continue
                normalized = round_weight(override)
                if abs(normalized - exercise.weight) >= 0.01:
                    pending.append((exercise, normalized))

        for exercise, weight in pending:
            self._save_exercise_weight(exercise, weight, backend)

        with self._lock:
            end = self.session_end if self.session_end is not None else self._clock()
            self.status = SessionStatus.completed
            self.session_end = end
            self.timer.finish(end)
            clear_stored_session(self.store, self.key)
            return SessionSummary(
                workout_id=self.workout_id,
                duration_seconds=self.timer.elapsed_seconds,
                volume=self.volume,
                completed_sets=self.completed_sets,
                total_sets=self.total_sets,
            )

    def abandon(self) -> None:
        with self._lock:
            clear_stored_session(self.store, self.key)

    def describe(self) -> SessionState:
        with self._lock:
            exercises = []
            for exercise in self.exercises:
                done = self.completed(exercise)
                exercises.append(
                    ExerciseProgress(
                        id=exercise.id,
                        name=exercise.name,
                        order_index=exercise.order_index,
                        sets=exercise.sets,
                        completed_sets=done,
                        reps=exercise.reps,
                        next_reps=exercise.reps_for(done) if done < exercise.sets else None,
                        weight=self.resolve_weight(exercise),
                        default_weight=exercise.weight,
                        rest_seconds=exercise.rest_seconds,
                        rest=self.rest_timers.get(exercise.id)
                        or RestTimerState.create(exercise.rest_seconds),
                        saving=exercise.id in self.saving,
                        finished=self.is_finished(exercise),
                    )
                )
            total = self.total_sets
            completed = self.completed_sets
            focus = self.focus_exercise
            return SessionState(
                workout_id=self.workout_id,
                workout_name=self.workout_name,
                status=self.status,
                elapsed_seconds=0 if self.status is SessionStatus.idle else self.timer.elapsed_seconds,
                session_start=self.session_start,
                session_end=self.session_end,
                volume=self.volume,
                total_sets=total,
                completed_sets=completed,
                percentage=0 if total == 0 else round(completed / total * 100),
                total_exercises=len(self.exercises),
                completed_exercises=self.completed_exercises,
                pending_sets=max(0, total - completed),
                workout_finished=self.workout_finished,
                active_exercise_id=self.active_exercise_id,
                focus_exercise_id=focus.id if focus else None,
                exercises=exercises,
            )

    # ---- internals ----

    def _save_exercise_weight(
        self, exercise: SessionExercise, weight: float, backend: SessionBackend
    ) -> None:
        """Store a new default weight for the exercise; failures are only logged."""
        if not math.isfinite(weight) or abs(weight - exercise.weight) < 0.01:
            return
        try:
            backend.update_exercise_weight(exercise.id, weight)
        except SessionBackendError:
            log.warning("Could not update the weight of exercise %s", exercise.id, exc_info=True)
            return
        with self._lock:
            exercise.weight = weight

    def _release_finished_focus(self) -> None:
        if self.active_exercise_id is None:
            return
        for exercise in self.exercises:
            if exercise.id == self.active_exercise_id:
                if self.is_finished(exercise):
                    self.active_exercise_id = None
                return
        self.active_exercise_id = None

    def _advance_rest_timers(self, seconds: int) -> None:
        if seconds <= 0:
            return
        changed = False
        for exercise_id, timer in self.rest_timers.items():
            advanced = timer.advance(seconds)
            if advanced != timer:
                self.rest_timers[exercise_id] = advanced
                changed = True
        if changed:
            self._persist()

    def _schedule_rest_tick(self) -> None:
        generation = self._rest_generation
        self._rest_handle = self._scheduler.call_later(
            self._tick_interval, lambda: self._on_rest_tick(generation)
        )

    def _on_rest_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._rest_generation or not self.mounted:
                return
            self.tick_rest_timers()
            self._schedule_rest_tick()
