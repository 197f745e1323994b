from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func

from gymii.models import Exercise, Workout
from gymii.repositories.base import BaseRepository, Page

class WorkoutRepository(BaseRepository[Workout]):
    model = Workout

    def get_owned(self, workout_id: int, user_id: int) -> Optional[Workout]:
        """Rows of other users are treated as missing."""
        workout = self.get(workout_id)
        if workout is None or workout.user_id != user_id:
            return None
        return workout

    def list_by_user(self, user_id: int, *, newest_first: bool = True,
                     limit: int = 50, offset: int = 0) -> Page[Workout]:
        order = (Workout.created_at.desc(), Workout.id.desc()) if newest_first \
            else (Workout.created_at.asc(), Workout.id.asc())
        stmt = select(Workout).where(Workout.user_id == user_id).order_by(*order)
        return self.page_from_stmt(stmt, limit=limit, offset=offset)

    def count_exercises(self, workout_ids: list[int]) -> dict[int, int]:
        if not workout_ids:
            return {}
        stmt = select(Exercise.workout_id, func.count(Exercise.id))\
            .where(Exercise.workout_id.in_(workout_ids))\
            .group_by(Exercise.workout_id)
        return {workout_id: count for workout_id, count in self.db.execute(stmt).all()}

    def create(self, user_id: int, *, name: str, muscle_group: str) -> Workout:
        return self.save(Workout(user_id=user_id, name=name, muscle_group=muscle_group))

    def update(self, workout: Workout, *, name: str, muscle_group: str) -> Workout:
        workout.name = name
        workout.muscle_group = muscle_group
        return self.save(workout)
