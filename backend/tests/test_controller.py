import json

import pytest

from conftest import RecordingBackend
from gymii.training.controller import WorkoutSessionController
from gymii.training.errors import (
    ConfirmationRequired,
    ExerciseAlreadyFinished,
    ExerciseNotFound,
    SessionNotStarted,
    SessionStateError,
    SetLogFailed,
)
from gymii.training.plans import parse_set_plan
from gymii.training.snapshots import FileKeyValueStore, SessionSnapshot, storage_key
from gymii.training.state import RestTimerState, SessionExercise
from gymii.training.timer import SessionStatus, SessionTimer

USER, WORKOUT = 1, 10
KEY = storage_key(USER, WORKOUT)

def exercise(id, sets=3, reps=10, weight=50.0, rest=60, order=0, plan=None):
    return SessionExercise(
        id=id, name=f"Ex {id}", sets=sets, reps=reps, weight=weight, rest_seconds=rest,
        order_index=order, set_plan=tuple(parse_set_plan(plan)),
    )

def make_controller(clock, scheduler, store, exercises, timer=None):
    controller = WorkoutSessionController(
        user_id=USER,
        workout_id=WORKOUT,
        workout_name="Treino A",
        exercises=exercises,
        timer=timer or SessionTimer(clock=clock, scheduler=scheduler),
        store=store,
        clock=clock,
        scheduler=scheduler,
    )
    controller.mount()
    return controller

def stored(store):
    return SessionSnapshot.model_validate_json(store.get(KEY))

def test_rest_timer_runs_between_sets(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1, sets=3, rest=60)])
    c.start()

    assert c.complete_set(1, backend) is True
    assert c.rest_timers[1] == RestTimerState(duration=60, remaining=60, active=True)

    scheduler.advance(59)
    assert c.rest_timers[1] == RestTimerState(duration=60, remaining=1, active=True)
    scheduler.advance(1)
    assert c.rest_timers[1] == RestTimerState(duration=60, remaining=0, active=False)

    assert c.complete_set(1, backend) is True
    assert c.rest_timers[1].active
    assert c.complete_set(1, backend) is True
    # the last set leaves the timer stopped and full
    assert c.rest_timers[1] == RestTimerState(duration=60, remaining=60, active=False)

    assert backend.logs == [(1, USER, 50.0, 10)] * 3
    assert c.volume == 1500

def test_finishing_every_set_allows_finalize_without_confirmation(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1, sets=2), exercise(2, sets=2, order=1)])
    c.start()
    scheduler.advance(30)
    for exercise_id in (1, 1, 2, 2):
        assert c.complete_set(exercise_id, backend)

    state = c.describe()
    assert state.workout_finished
    assert state.percentage == 100
    assert state.pending_sets == 0
    assert state.focus_exercise_id is None

    summary = c.finalize(backend)
    assert summary.completed_sets == 4
    assert summary.total_sets == 4
    assert summary.duration_seconds == 30
    assert c.status is SessionStatus.completed
    assert c.timer.status is SessionStatus.completed
    assert store.get(KEY) is None

def test_finalize_with_pending_sets_needs_confirmation(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1, sets=2), exercise(2, sets=2, order=1)])
    c.start()
    c.complete_set(1, backend)

    with pytest.raises(ConfirmationRequired) as exc:
        c.finalize(backend)
    assert exc.value.pending_sets == 3
    assert exc.value.pending_exercises == 2
    # cancelling keeps everything as it was
    assert c.status is SessionStatus.in_progress
    assert stored(store).progress == {1: 1, 2: 0}

    summary = c.finalize(backend, confirm=True)
    assert summary.completed_sets == 1
    assert store.get(KEY) is None

def test_failed_log_rolls_back(clock, scheduler, store, failing_backend):
    c = make_controller(clock, scheduler, store, [exercise(1)])
    c.start()
    with pytest.raises(SetLogFailed):
        c.complete_set(1, failing_backend)
    assert c.progress[1] == 0
    assert c.saving == set()
    assert c.volume == 0
    assert c.rest_timers[1].active is False
    assert stored(store).progress == {1: 0}

def test_duplicate_request_while_saving_is_ignored(clock, scheduler, store):
    class ReentrantBackend(RecordingBackend):
        controller = None
        nested = []
        saving_seen = []

        def insert_log(self, **kwargs):
            self.saving_seen.append(self.controller.describe().exercises[0].saving)
            self.nested.append(self.controller.complete_set(kwargs["exercise_id"], self))
            super().insert_log(**kwargs)

    c = make_controller(clock, scheduler, store, [exercise(1)])
    backend = ReentrantBackend()
    backend.controller = c
    c.start()
    assert c.complete_set(1, backend) is True
    assert backend.saving_seen == [True]
    assert backend.nested == [False]
    assert len(backend.logs) == 1
    assert c.progress[1] == 1

def test_finished_exercise_ignores_more_sets(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1, sets=1), exercise(2, order=1)])
    c.start()
    assert c.complete_set(1, backend) is True
    assert c.complete_set(1, backend) is False
    assert len(backend.logs) == 1

def test_session_must_be_started(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1)])
    with pytest.raises(SessionNotStarted):
        c.complete_set(1, backend)
    with pytest.raises(SessionNotStarted):
        c.finalize(backend, confirm=True)
    with pytest.raises(ExerciseNotFound):
        c.set_weight(99, 10)
    c.start()
    with pytest.raises(SessionStateError):
        c.start()

def test_workout_without_exercises_cannot_start(clock, scheduler, store):
    c = make_controller(clock, scheduler, store, [])
    with pytest.raises(SessionStateError):
        c.start()
    assert c.describe().workout_finished is False

def test_plan_drives_reps_and_weights(clock, scheduler, store, backend):
    plan = [{"set": 1, "reps": 12, "weight": 40}, {"set": 2, "reps": 10, "weight": 45}, {"set": 3, "reps": 8, "weight": 50}]
    c = make_controller(clock, scheduler, store, [exercise(1, sets=3, reps=12, weight=40, plan=plan)])
    c.start()
    assert c.describe().exercises[0].next_reps == 12
    c.complete_set(1, backend)
    assert c.describe().exercises[0].weight == 45
    assert c.describe().exercises[0].next_reps == 10
    c.complete_set(1, backend)
    c.complete_set(1, backend)
    assert backend.logs == [(1, USER, 40, 12), (1, USER, 45, 10), (1, USER, 50, 8)]
    assert c.volume == 1330
    # the weight actually lifted becomes the exercise default
    assert backend.weights == [(1, 45), (1, 50)]
    assert c.describe().exercises[0].next_reps is None

def test_weight_overrides(clock, scheduler, store):
    c = make_controller(clock, scheduler, store, [exercise(1, weight=50)])
    assert c.set_weight(1, 62.5) == 62.5
    assert c.adjust_weight(1, 2.5) == 65
    assert c.adjust_weight(1, -100) == 0
    assert c.set_weight(1, None) == 50
    # nothing is stored before the session starts
    assert store.keys() == []
    c.start()
    c.set_weight(1, 55)
    assert stored(store).weight_overrides == {1: 55}

def test_weight_save_failure_does_not_undo_the_set(clock, scheduler, store):
    backend = RecordingBackend(fail_weights=True)
    c = make_controller(clock, scheduler, store, [exercise(1, weight=50)])
    c.start()
    c.set_weight(1, 55)
    assert c.complete_set(1, backend) is True
    assert backend.logs == [(1, USER, 55, 10)]
    assert c.exercises[0].weight == 50

def test_finalize_saves_pending_weight_overrides(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1, weight=50), exercise(2, weight=30, order=1)])
    c.start()
    c.set_weight(2, 35)
    c.finalize(backend, confirm=True)
    assert backend.weights == [(2, 35)]

def test_focus_selection(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1, sets=2), exercise(2, sets=1, order=1)])
    assert c.describe().focus_exercise_id is None
    c.start()
    assert c.describe().focus_exercise_id == 1
    c.select_exercise(2)
    assert c.describe().focus_exercise_id == 2
    c.complete_set(2, backend)
    # a finished exercise gives the focus back
    assert c.active_exercise_id is None
    assert c.describe().focus_exercise_id == 1
    with pytest.raises(ExerciseAlreadyFinished):
        c.select_exercise(2)
    c.select_exercise(None)
    assert c.describe().focus_exercise_id == 1

def test_remount_restores_progress_and_catches_up(clock, scheduler, store, backend):
    first = make_controller(clock, scheduler, store, [exercise(1, rest=60)])
    first.start()
    first.complete_set(1, backend)
    first.unmount()

    clock.advance(25)
    second = make_controller(clock, scheduler, store, [exercise(1, rest=60)])
    assert second.status is SessionStatus.in_progress
    assert second.progress == {1: 1}
    assert second.volume == 500
    assert second.rest_timers[1] == RestTimerState(duration=60, remaining=35, active=True)
    assert second.timer.elapsed_seconds == 25
    assert second.describe().elapsed_seconds == 25

def test_unmounted_controller_stops_ticking(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1)])
    c.start()
    c.complete_set(1, backend)
    c.unmount()
    scheduler.advance(10)
    assert c.rest_timers[1].remaining == 60

def test_catch_up_applies_missed_seconds(clock, scheduler, store, backend):
    c = make_controller(clock, scheduler, store, [exercise(1)])
    c.start()
    c.complete_set(1, backend)
    clock.advance(12.5)
    c.catch_up()
    assert c.rest_timers[1].remaining == 48

def test_unreadable_snapshot_is_discarded(clock, scheduler, store):
    store.set(KEY, "{not json")
    c = make_controller(clock, scheduler, store, [exercise(1)])
    assert c.status is SessionStatus.idle
    assert store.get(KEY) is None

def test_snapshot_file_that_is_not_utf8_is_discarded(clock, scheduler, tmp_path):
    store = FileKeyValueStore(tmp_path)
    store._path(KEY).write_bytes(b"\xff\xfe garbage")
    c = make_controller(clock, scheduler, store, [exercise(1)])
    assert c.status is SessionStatus.idle
    assert store.keys() == []

def test_invalid_weight_entry_keeps_progress(clock, scheduler, store):
    store.set(KEY, json.dumps({
        "version": 1, "user_id": USER, "workout_id": WORKOUT, "session_status": "in_progress",
        "session_start": clock.now, "last_updated": clock.now,
        "progress": {"1": 2}, "weight_overrides": {"1": None},
    }))
    c = make_controller(clock, scheduler, store, [exercise(1, weight=50.0)])
    assert c.status is SessionStatus.in_progress
    assert c.progress == {1: 2}
    assert c.weight_overrides == {1: 50.0}
    assert store.get(KEY) is not None

def test_snapshot_of_other_user_is_discarded(clock, scheduler, store):
    foreign = SessionSnapshot(version=1, user_id=2, workout_id=WORKOUT, session_status="in_progress",
                              session_start=clock.now)
    store.set(KEY, foreign.model_dump_json())
    c = make_controller(clock, scheduler, store, [exercise(1)])
    assert c.status is SessionStatus.idle
    assert store.get(KEY) is None

def test_abandon_clears_snapshot(clock, scheduler, store):
    c = make_controller(clock, scheduler, store, [exercise(1)])
    c.start()
    assert store.get(KEY) is not None
    c.abandon()
    assert store.get(KEY) is None
