from __future__ import annotations
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from gymii.models import Exercise, Workout, WorkoutLog
from gymii.training.progress import LogRecord

class LogRepository:
    """Workout logs are only ever appended."""
    def __init__(self, db: Session):
        self.db = db

    def create(self, *, exercise_id: int, user_id: int, weight: float, reps: int, sets: int = 1) -> WorkoutLog:
        log = WorkoutLog(exercise_id=exercise_id, user_id=user_id, weight=weight, reps=reps, sets=sets)
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def records_since(self, user_id: int, since: datetime) -> list[LogRecord]:
        stmt = (
            select(WorkoutLog, Exercise.name, Workout.muscle_group)
            .join(Exercise, WorkoutLog.exercise_id == Exercise.id)
            .join(Workout, Exercise.workout_id == Workout.id)
            .where(WorkoutLog.user_id == user_id, WorkoutLog.completed_at >= since)
            .order_by(WorkoutLog.completed_at.asc(), WorkoutLog.id.asc())
        )
        return [
            LogRecord(
                completed_at=log.completed_at,
                sets=log.sets,
                reps=log.reps,
                weight=log.weight,
                exercise_name=exercise_name,
                muscle_group=muscle_group,
            )
            for log, exercise_name, muscle_group in self.db.execute(stmt).all()
        ]
