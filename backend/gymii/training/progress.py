"""Aggregated training statistics over logged sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from gymii.training.plans import DEFAULT_EXERCISE_NAME, format_muscle_group_label, muscle_groups_from_string

SUMMARY_DAYS = 30
DATA_WINDOW_DAYS = 90
WEEKS_TO_SHOW = 6
TOP_EXERCISES = 4
RECENT_SESSIONS = 4
DEFAULT_MUSCLE_GROUP = "Geral"


@dataclass(frozen=True)
class LogRecord:
    completed_at: datetime | None
    sets: float | None
    reps: float | None
    weight: float | None
    exercise_name: str | None = None
    muscle_group: str | None = None


@dataclass(frozen=True)
class ProgressSummary:
    total_volume: float
    total_sets: int
    total_sessions: int


@dataclass(frozen=True)
class WeeklyVolume:
    label: str
    week_start: date
    volume: int


@dataclass(frozen=True)
class MuscleShare:
    muscle: str
    volume: float
    percentage: float


@dataclass(frozen=True)
class ExerciseShare:
    name: str
    volume: float
    percentage: float
    sessions: int


@dataclass(frozen=True)
class RecentSession:
    date: date
    label: str
    volume: float
    exercises: list[str]


@dataclass(frozen=True)
class ProgressStats:
    has_logs: bool
    summary: ProgressSummary
    weekly_trend: list[WeeklyVolume]
    muscle_distribution: list[MuscleShare]
    top_exercises: list[ExerciseShare]
    recent_sessions: list[RecentSession]


@dataclass
class _Entry:
    completed_at: datetime
    sets: float
    volume: float
    exercise_name: str
    muscles: list[str]
    day: date


@dataclass
class _SessionDay:
    first_seen: datetime
    volume: float = 0.0
    exercises: list[str] = field(default_factory=list)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _number(value: float | None) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _enrich(logs: Iterable[LogRecord]) -> list[_Entry]:
    entries = []
    for log in logs:
        if log.completed_at is None:
            continue
        completed_at = _as_utc(log.completed_at)
        sets = _number(log.sets)
        volume = max(sets * _number(log.reps) * _number(log.weight), 0.0)
        name = (log.exercise_name or "").strip() or DEFAULT_EXERCISE_NAME
        muscles = muscle_groups_from_string(log.muscle_group) or [DEFAULT_MUSCLE_GROUP]
        entries.append(
            _Entry(
                completed_at=completed_at,
                sets=sets,
                volume=volume,
                exercise_name=name,
                muscles=[format_muscle_group_label(m) for m in muscles],
                day=completed_at.date(),
            )
        )
    return entries


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def compute_progress(logs: Iterable[LogRecord], now: datetime | None = None) -> ProgressStats:
    now = _as_utc(now or datetime.now(timezone.utc))
    entries = _enrich(logs)

    summary_start = now - timedelta(days=SUMMARY_DAYS)
    recent = [e for e in entries if e.completed_at >= summary_start]
    summary = ProgressSummary(
        total_volume=sum(e.volume for e in recent),
        total_sets=int(sum(e.sets for e in recent)),
        total_sessions=len({e.day for e in recent}),
    )

    global_volume = sum(e.volume for e in entries)
    exercise_volume: dict[str, float] = {}
    exercise_days: dict[str, set[date]] = {}
    muscle_volume: dict[str, float] = {}
    days: dict[date, _SessionDay] = {}

    for entry in entries:
        exercise_volume[entry.exercise_name] = exercise_volume.get(entry.exercise_name, 0.0) + entry.volume
        exercise_days.setdefault(entry.exercise_name, set()).add(entry.day)
        for muscle in entry.muscles:
            muscle_volume[muscle] = muscle_volume.get(muscle, 0.0) + entry.volume
        day = days.setdefault(entry.day, _SessionDay(first_seen=entry.completed_at))
        day.volume += entry.volume
        if entry.exercise_name not in day.exercises:
            day.exercises.append(entry.exercise_name)

    this_week = week_start(now.date())
    weekly_trend = []
    for offset in range(WEEKS_TO_SHOW - 1, -1, -1):
        start = this_week - timedelta(weeks=offset)
        end = start + timedelta(days=7)
        volume = sum(e.volume for e in entries if start <= e.day < end)
        weekly_trend.append(WeeklyVolume(label=start.strftime("%d/%m"), week_start=start, volume=round(volume)))

    def share(volume: float) -> float:
        return volume / global_volume * 100 if global_volume > 0 else 0.0

    muscle_distribution = [
        MuscleShare(muscle=muscle, volume=volume, percentage=share(volume))
        for muscle, volume in sorted(muscle_volume.items(), key=lambda item: item[1], reverse=True)
    ]
    top_exercises = sorted(
        (
            ExerciseShare(name=name, volume=volume, percentage=share(volume), sessions=len(exercise_days[name]))
            for name, volume in exercise_volume.items()
        ),
        key=lambda item: item.volume,
        reverse=True,
    )[:TOP_EXERCISES]
    recent_sessions = [
        RecentSession(date=day, label=day.strftime("%d/%m"), volume=info.volume, exercises=info.exercises[:3])
        for day, info in sorted(days.items(), key=lambda item: item[1].first_seen, reverse=True)[:RECENT_SESSIONS]
    ]

    return ProgressStats(
        has_logs=bool(entries),
        summary=summary,
        weekly_trend=weekly_trend,
        muscle_distribution=muscle_distribution,
        top_exercises=top_exercises,
        recent_sessions=recent_sessions,
    )
