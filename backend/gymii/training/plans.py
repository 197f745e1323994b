"""Parsing of loosely-typed set plans and workout templates."""

from __future__ import annotations

import math
from decimal import Decimal
from dataclasses import dataclass, field
from typing import Any, Mapping

DEFAULT_EXERCISE_NAME = "Exercício"

MUSCLE_GROUP_LABELS = {
    "Aerobico": "Aeróbico",
    "Biceps": "Bíceps",
    "Triceps": "Tríceps",
    "Abdomen": "Abdômen",
}


@dataclass(frozen=True)
class SetPlanEntry:
    set: int
    reps: int | None = None
    weight: float | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"set": self.set}
        if self.reps is not None:
            out["reps"] = self.reps
        if self.weight is not None:
            out["weight"] = self.weight
        return out


@dataclass(frozen=True)
class TemplateExercise:
    name: str
    rest_seconds: int | None = None
    effort: str | None = None
    set_plan: tuple[SetPlanEntry, ...] = ()


@dataclass(frozen=True)
class TemplateDefinition:
    slug: str
    name: str
    description: str | None
    muscle_groups: list[str]
    intensity: str | None
    rest_seconds: int | None
    duration_minutes: int | None
    exercises: list[TemplateExercise] = field(default_factory=list)


def coerce_number(raw: object) -> float | None:
    """Return a finite float for numbers and numeric strings, else None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def coerce_int(raw: object) -> int | None:
    value = coerce_number(raw)
    return None if value is None else int(value)


def parse_set_plan(value: object) -> list[SetPlanEntry]:
    if not isinstance(value, list):
        return []

    plan: list[SetPlanEntry] = []
    for index, raw in enumerate(value):
        if not isinstance(raw, Mapping):
            plan.append(SetPlanEntry(set=index + 1))
            continue
        set_index = coerce_int(raw.get("set"))
        plan.append(
            SetPlanEntry(
                set=set_index if set_index is not None else index + 1,
                reps=coerce_int(raw.get("reps")),
                weight=coerce_number(raw.get("weight")),
            )
        )
    return plan


def first_set_plan_entry(plan: list[SetPlanEntry] | tuple[SetPlanEntry, ...]) -> SetPlanEntry | None:
    return plan[0] if plan else None


def plan_to_json(plan: list[SetPlanEntry] | tuple[SetPlanEntry, ...]) -> list[dict[str, Any]]:
    return [entry.to_dict() for entry in plan]


def parse_template_exercises(value: object) -> list[TemplateExercise]:
    if not isinstance(value, list):
        return []

    exercises: list[TemplateExercise] = []
    for raw in value:
        if not isinstance(raw, Mapping):
            continue
        name = raw.get("name")
        effort = raw.get("effort")
        exercises.append(
            TemplateExercise(
                name=name if isinstance(name, str) else DEFAULT_EXERCISE_NAME,
                rest_seconds=coerce_int(raw.get("rest_seconds")),
                effort=effort if isinstance(effort, str) else None,
                set_plan=tuple(parse_set_plan(raw.get("set_plan"))),
            )
        )
    return exercises


def parse_template(row: Any) -> TemplateDefinition:
    """Build a template from a stored row (ORM object or mapping)."""
    get = row.get if isinstance(row, Mapping) else lambda key: getattr(row, key, None)

    groups = get("muscle_groups")
    description = get("description")
    intensity = get("intensity")
    return TemplateDefinition(
        slug=str(get("slug") or ""),
        name=str(get("name") or "Treino"),
        description=str(description) if description else None,
        muscle_groups=[str(item) for item in groups] if isinstance(groups, list) else [],
        intensity=str(intensity) if intensity else None,
        rest_seconds=coerce_int(get("rest_seconds")),
        duration_minutes=coerce_int(get("duration_minutes")),
        exercises=parse_template_exercises(get("exercises")),
    )


def muscle_groups_from_string(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def stringify_muscle_groups(groups: list[str]) -> str:
    return ", ".join(groups)


def format_muscle_group_label(value: str) -> str:
    return MUSCLE_GROUP_LABELS.get(value, value)
