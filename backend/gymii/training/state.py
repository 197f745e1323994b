"""Value types shared by the session controller and its persistence."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any

from gymii.training.plans import SetPlanEntry, coerce_int, coerce_number, first_set_plan_entry, parse_set_plan

MIN_REST_SECONDS = 10
DEFAULT_REST_SECONDS = 60


@dataclass(frozen=True)
class RestTimerState:
    duration: int
    remaining: int
    active: bool = False

    def __post_init__(self) -> None:
        if self.remaining <= 0 and self.active:
            object.__setattr__(self, "active", False)

    @classmethod
    def create(cls, rest_seconds: float) -> "RestTimerState":
        duration = max(MIN_REST_SECONDS, round(rest_seconds) or DEFAULT_REST_SECONDS)
        return cls(duration=duration, remaining=duration, active=False)

    def start(self) -> "RestTimerState":
        return replace(self, remaining=self.duration, active=True)

    def stop(self) -> "RestTimerState":
        return replace(self, remaining=self.duration, active=False)

    def advance(self, seconds: int) -> "RestTimerState":
        if not self.active or seconds <= 0:
            return self
        remaining = max(0, self.remaining - seconds)
        return replace(self, remaining=remaining, active=remaining > 0)


@dataclass
class SessionExercise:
    id: int
    name: str
    sets: int
    reps: int
    weight: float
    rest_seconds: int
    order_index: int = 0
    set_plan: tuple[SetPlanEntry, ...] = ()

    @classmethod
    def from_record(cls, row: Any) -> "SessionExercise":
        """Normalise a stored exercise row, filling gaps from its set plan."""
        plan = parse_set_plan(getattr(row, "set_plan", None))
        first = first_set_plan_entry(plan)

        weight = coerce_number(getattr(row, "weight", None))
        if weight is None:
            weight = first.weight if first and first.weight is not None else 0.0
        reps = coerce_int(getattr(row, "reps", None))
        if reps is None:
            reps = first.reps if first and first.reps is not None else 0
        sets = coerce_int(getattr(row, "sets", None))
        if sets is None or sets <= 0:
            sets = len(plan) or 1
        rest = coerce_int(getattr(row, "rest_seconds", None))
        if rest is None or rest < 0:
            rest = DEFAULT_REST_SECONDS

        return cls(
            id=int(row.id),
            name=str(row.name),
            sets=sets,
            reps=reps,
            weight=weight,
            rest_seconds=rest,
            order_index=coerce_int(getattr(row, "order_index", None)) or 0,
            set_plan=tuple(plan),
        )

    @property
    def default_weight(self) -> float:
        first = first_set_plan_entry(self.set_plan)
        if first is not None and first.weight is not None:
            return first.weight
        return self.weight

    def plan_entry(self, index: int) -> SetPlanEntry | None:
        return self.set_plan[index] if 0 <= index < len(self.set_plan) else None

    def reps_for(self, index: int) -> int:
        entry = self.plan_entry(index)
        return entry.reps if entry and entry.reps is not None else self.reps


def round_weight(value: float) -> float:
    return max(0.0, round(value * 100) / 100)


def is_valid_weight(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )
