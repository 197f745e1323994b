"""
Point the app at a throwaway SQLite database and snapshot directory, and
create the schema with the template catalog. Runs before any test module
imports the app.
"""
import os
import tempfile

import pytest

_TMP = tempfile.mkdtemp(prefix="gymii-tests-")
os.environ["DB_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["SNAPSHOT_DIR"] = os.path.join(_TMP, "sessions")

from gymii.db import Base, SessionLocal, engine  # noqa: E402
from gymii import models  # noqa: E402,F401
from gymii.repositories.template_repo import TemplateRepository  # noqa: E402
from gymii.training.catalog import TEMPLATES  # noqa: E402
from gymii.training.errors import SessionBackendError  # noqa: E402
from gymii.training.snapshots import MemoryKeyValueStore  # noqa: E402

Base.metadata.create_all(engine)
with SessionLocal() as _db:
    TemplateRepository(_db).seed(TEMPLATES)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHandle:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Fires callbacks in due order while moving the shared clock forward."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.handles: list[FakeHandle] = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self.clock.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        target = self.clock.now + seconds
        while True:
            due = sorted((h for h in self.pending if h.due <= target), key=lambda h: h.due)
            if not due:
                break
            handle = due[0]
            self.clock.now = max(self.clock.now, handle.due)
            handle.fired = True
            handle.callback()
        self.clock.now = target


class RecordingBackend:
    def __init__(self, fail_logs=False, fail_weights=False):
        self.fail_logs = fail_logs
        self.fail_weights = fail_weights
        self.logs = []
        self.weights = []

    def insert_log(self, *, exercise_id, user_id, weight, reps):
        if self.fail_logs:
            raise SessionBackendError("insert failed")
        self.logs.append((exercise_id, user_id, weight, reps))

    def update_exercise_weight(self, exercise_id, weight):
        if self.fail_weights:
            raise SessionBackendError("update failed")
        self.weights.append((exercise_id, weight))


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def scheduler(clock):
    return FakeScheduler(clock)

@pytest.fixture
def store():
    return MemoryKeyValueStore()

@pytest.fixture
def backend():
    return RecordingBackend()

@pytest.fixture
def failing_backend():
    return RecordingBackend(fail_logs=True, fail_weights=True)
