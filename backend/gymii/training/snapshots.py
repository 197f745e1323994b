"""Durable snapshots of in-progress workout sessions.

A snapshot is written to a string key/value store under a key built from the
user and workout ids, overwritten on every change while a session runs, and
removed when the session is finalised or discarded. The store has no expiry:
validity is checked on read (schema version, owner, workout) and stale
entries are ignored by the resume scan.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote, unquote

from pydantic import BaseModel, ValidationError, field_validator

from gymii.training.plans import coerce_int, coerce_number
from gymii.training.state import RestTimerState, SessionExercise, is_valid_weight, round_weight
from gymii.training.timer import SessionStatus

log = logging.getLogger(__name__)

SESSION_STORAGE_PREFIX = "gymii-active-session"
SESSION_STORAGE_VERSION = 1
DEFAULT_RESUME_WINDOW = timedelta(hours=12)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileKeyValueStore:
    """One UTF-8 file per key inside ``directory``."""

    suffix = ".json"

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / (quote(key, safe="") + self.suffix)

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp, self._path(key))
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            unquote(path.name[: -len(self.suffix)])
            for path in self.directory.glob("*" + self.suffix)
        )


def storage_key(user_id: int, workout_id: int) -> str:
    return f"{SESSION_STORAGE_PREFIX}:{user_id}:{workout_id}"


# ---- snapshot schema ----
# Only the identity fields are strict. Every other field falls back to its
# default when the stored value is unusable, so one bad entry does not cost
# the whole session.

def _int_keyed(v: object) -> dict[int, Any]:
    if not isinstance(v, dict):
        return {}
    out: dict[int, Any] = {}
    for key, value in v.items():
        number = coerce_number(key)
        if number is not None and number == int(number):
            out[int(number)] = value
    return out


class RestTimerPayload(BaseModel):
    duration: float = 0
    remaining: float | None = None
    active: bool = False

    @field_validator("duration", mode="before")
    @classmethod
    def duration_or_zero(cls, v: object) -> float:
        return coerce_number(v) or 0

    @field_validator("remaining", mode="before")
    @classmethod
    def remaining_or_none(cls, v: object) -> float | None:
        return coerce_number(v)

    @field_validator("active", mode="before")
    @classmethod
    def active_flag(cls, v: object) -> bool:
        return v is True


class SessionSnapshot(BaseModel):
    version: int
    user_id: int
    workout_id: int
    workout_name: str | None = None
    session_status: SessionStatus | None = None
    session_start: float | None = None
    session_end: float | None = None
    session_volume: float = 0.0
    progress: dict[int, Any] = {}
    weight_overrides: dict[int, Any] = {}
    rest_timers: dict[int, RestTimerPayload | None] = {}
    last_updated: float | None = None
    active_exercise_id: int | None = None

    @field_validator("session_status", mode="before")
    @classmethod
    def unknown_status_is_absent(cls, v: object) -> object:
        if isinstance(v, SessionStatus):
            return v
        valid = {status.value for status in SessionStatus}
        return v if isinstance(v, str) and v in valid else None

    @field_validator("workout_name", mode="before")
    @classmethod
    def name_or_none(cls, v: object) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator("session_start", "session_end", "last_updated", mode="before")
    @classmethod
    def timestamp_or_none(cls, v: object) -> float | None:
        return coerce_number(v)

    @field_validator("session_volume", mode="before")
    @classmethod
    def volume_or_zero(cls, v: object) -> float:
        return coerce_number(v) or 0.0

    @field_validator("active_exercise_id", mode="before")
    @classmethod
    def exercise_id_or_none(cls, v: object) -> int | None:
        return coerce_int(v)

    @field_validator("progress", "weight_overrides", mode="before")
    @classmethod
    def per_exercise_map(cls, v: object) -> dict[int, Any]:
        return _int_keyed(v)

    @field_validator("rest_timers", mode="before")
    @classmethod
    def rest_timer_map(cls, v: object) -> dict[int, object]:
        return {
            key: value if isinstance(value, (dict, RestTimerPayload)) else None
            for key, value in _int_keyed(v).items()
        }

    def resolved_status(self) -> SessionStatus:
        if self.session_status is not None:
            return self.session_status
        if self.session_start:
            return SessionStatus.completed if self.session_end else SessionStatus.in_progress
        return SessionStatus.idle

    def updated_at(self, now: float) -> float:
        if self.last_updated is not None:
            return self.last_updated
        if self.session_start is not None:
            return self.session_start
        return now


@dataclass
class RestoredState:
    status: SessionStatus
    session_start: float | None
    session_end: float | None
    session_volume: float
    progress: dict[int, int]
    weight_overrides: dict[int, float]
    rest_timers: dict[int, RestTimerState]
    active_exercise_id: int | None


def restore_progress(raw: dict[int, Any], exercises: list[SessionExercise]) -> dict[int, int]:
    safe: dict[int, int] = {}
    for exercise in exercises:
        value = coerce_number(raw.get(exercise.id))
        safe[exercise.id] = 0 if value is None else max(0, min(exercise.sets, round(value)))
    return safe


def restore_weights(raw: dict[int, Any], exercises: list[SessionExercise]) -> dict[int, float]:
    safe: dict[int, float] = {}
    for exercise in exercises:
        value = raw.get(exercise.id)
        safe[exercise.id] = round_weight(value) if is_valid_weight(value) else exercise.default_weight
    return safe


def restore_rest_timers(
    raw: dict[int, RestTimerPayload | None],
    exercises: list[SessionExercise],
    seconds_since_update: int,
) -> dict[int, RestTimerState]:
    safe: dict[int, RestTimerState] = {}
    for exercise in exercises:
        fallback = RestTimerState.create(exercise.rest_seconds)
        timer = raw.get(exercise.id)
        if timer is None:
            safe[exercise.id] = fallback
            continue

        stored_duration = int(timer.duration) if math.isfinite(timer.duration) else 0
        duration = max(10, stored_duration or fallback.duration)
        if timer.remaining is None or not math.isfinite(timer.remaining):
            remaining = duration
        else:
            remaining = min(duration, max(0, int(timer.remaining)))
        state = RestTimerState(duration=duration, remaining=remaining, active=timer.active)
        safe[exercise.id] = state.advance(seconds_since_update)
    return safe


def restore_state(
    snapshot: SessionSnapshot, exercises: list[SessionExercise], now: float
) -> RestoredState:
    """Rebuild controller state, catching rest timers up with the wall clock."""
    if snapshot.session_end is not None:
        seconds_since_update = 0
    else:
        seconds_since_update = max(0, math.floor(now - snapshot.updated_at(now)))

    return RestoredState(
        status=snapshot.resolved_status(),
        session_start=snapshot.session_start,
        session_end=snapshot.session_end,
        session_volume=snapshot.session_volume if math.isfinite(snapshot.session_volume) else 0.0,
        progress=restore_progress(snapshot.progress, exercises),
        weight_overrides=restore_weights(snapshot.weight_overrides, exercises),
        rest_timers=restore_rest_timers(snapshot.rest_timers, exercises, seconds_since_update),
        active_exercise_id=snapshot.active_exercise_id,
    )


# ---- global scan ----

@dataclass(frozen=True)
class StoredSessionEntry:
    key: str
    user_id: int
    workout_id: int
    workout_name: str | None
    status: SessionStatus
    session_start: float | None
    session_end: float | None
    last_updated: float = field(default=0.0)


def read_stored_sessions(store: KeyValueStore, now: float | None = None) -> list[StoredSessionEntry]:
    now = time.time() if now is None else now
    entries: list[StoredSessionEntry] = []
    for key in store.keys():
        if not key.startswith(SESSION_STORAGE_PREFIX):
            continue
        try:
            raw = store.get(key)
        except (UnicodeDecodeError, OSError):
            log.warning("Ignoring unreadable session snapshot %s", key, exc_info=True)
            continue
        if not raw:
            continue
        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValidationError:
            log.warning("Ignoring unreadable session snapshot %s", key)
            continue
        if snapshot.version != SESSION_STORAGE_VERSION:
            continue
        entries.append(
            StoredSessionEntry(
                key=key,
                user_id=snapshot.user_id,
                workout_id=snapshot.workout_id,
                workout_name=snapshot.workout_name,
                status=snapshot.resolved_status(),
                session_start=snapshot.session_start,
                session_end=snapshot.session_end,
                last_updated=snapshot.updated_at(now),
            )
        )
    return entries


def find_latest_active_session(
    store: KeyValueStore,
    user_id: int,
    *,
    max_age: timedelta = DEFAULT_RESUME_WINDOW,
    now: float | None = None,
) -> StoredSessionEntry | None:
    now = time.time() if now is None else now
    candidates = [
        entry
        for entry in read_stored_sessions(store, now)
        if entry.user_id == user_id
        and entry.status is SessionStatus.in_progress
        and now - entry.last_updated <= max_age.total_seconds()
    ]
    candidates.sort(key=lambda entry: entry.last_updated, reverse=True)
    return candidates[0] if candidates else None


def clear_stored_session(store: KeyValueStore, key: str) -> None:
    if not key:
        return
    try:
        store.remove(key)
    except OSError:
        log.warning("Failed to clear stored session %s", key, exc_info=True)
