from __future__ import annotations
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from gymii.models import Exercise, Workout, WorkoutTemplate
from gymii.repositories.base import BaseRepository
from gymii.training.plans import (
    TemplateDefinition,
    first_set_plan_entry,
    plan_to_json,
    stringify_muscle_groups,
)

DEFAULT_TEMPLATE_SETS = 3
DEFAULT_TEMPLATE_REPS = 10
DEFAULT_REST_SECONDS = 60

class TemplateRepository(BaseRepository[WorkoutTemplate]):
    model = WorkoutTemplate

    def list(self) -> list[WorkoutTemplate]:
        stmt = select(WorkoutTemplate).order_by(WorkoutTemplate.name.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_by_slug(self, slug: str) -> Optional[WorkoutTemplate]:
        stmt = select(WorkoutTemplate).where(WorkoutTemplate.slug == slug)
        return self.db.execute(stmt).scalar_one_or_none()

    def seed(self, templates: Iterable[dict[str, Any]]) -> int:
        """Insert or refresh catalog rows by slug. Returns the number of rows written."""
        count = 0
        for data in templates:
            row = self.get_by_slug(data["slug"]) or WorkoutTemplate(slug=data["slug"])
            for field in ("name", "description", "muscle_groups", "intensity",
                          "rest_seconds", "duration_minutes", "exercises"):
                setattr(row, field, data.get(field))
            self.db.add(row)
            count += 1
        self.db.commit()
        return count

    def import_for_user(self, template: TemplateDefinition, user_id: int) -> Workout:
        """Clone a template into a new workout owned by ``user_id``.

        The workout and its exercises are written in one transaction; the
        template is not referenced afterwards.
        """
        workout = Workout(
            user_id=user_id,
            name=template.name,
            muscle_group=stringify_muscle_groups(template.muscle_groups),
        )
        for index, item in enumerate(template.exercises):
            plan = list(item.set_plan)
            first = first_set_plan_entry(plan)
            if item.rest_seconds is not None:
                rest = item.rest_seconds
            elif template.rest_seconds is not None:
                rest = template.rest_seconds
            else:
                rest = DEFAULT_REST_SECONDS
            workout.exercises.append(
                Exercise(
                    name=item.name,
                    sets=len(plan) or DEFAULT_TEMPLATE_SETS,
                    reps=first.reps if first and first.reps is not None else DEFAULT_TEMPLATE_REPS,
                    weight=first.weight if first and first.weight is not None else 0,
                    rest_seconds=rest,
                    order_index=index,
                    set_plan=plan_to_json(plan) if plan else None,
                )
            )
        try:
            return self.save(workout)
        except SQLAlchemyError:
            self.db.rollback()
            raise
