from __future__ import annotations
from typing import Any, Optional

from sqlalchemy import select, func

from gymii.models import Exercise, Workout
from gymii.repositories.base import BaseRepository
from gymii.training.state import SessionExercise

class ExerciseRepository(BaseRepository[Exercise]):
    model = Exercise

    def get_owned(self, exercise_id: int, user_id: int) -> Optional[Exercise]:
        exercise = self.get(exercise_id)
        if exercise is None or exercise.workout.user_id != user_id:
            return None
        return exercise

    def list_by_workout(self, workout_id: int) -> list[Exercise]:
        stmt = select(Exercise).where(Exercise.workout_id == workout_id)\
                               .order_by(Exercise.order_index.asc(), Exercise.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def session_exercises(self, workout_id: int) -> list[SessionExercise]:
        return [SessionExercise.from_record(row) for row in self.list_by_workout(workout_id)]

    def next_order_index(self, workout_id: int) -> int:
        stmt = select(func.count(Exercise.id)).where(Exercise.workout_id == workout_id)
        return self.db.execute(stmt).scalar_one()

    def create(self, workout: Workout, **fields: Any) -> Exercise:
        fields.setdefault("order_index", self.next_order_index(workout.id))
        return self.save(Exercise(workout_id=workout.id, **fields))

    def update(self, exercise: Exercise, **fields: Any) -> Exercise:
        for name, value in fields.items():
            setattr(exercise, name, value)
        return self.save(exercise)

    def update_weight(self, exercise_id: int, weight: float) -> Optional[Exercise]:
        exercise = self.get(exercise_id)
        if exercise is None:
            return None
        exercise.weight = weight
        return self.save(exercise)
