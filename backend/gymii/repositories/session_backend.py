from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gymii.repositories.exercise_repo import ExerciseRepository
from gymii.repositories.log_repo import LogRepository
from gymii.training.errors import SessionBackendError

class DatabaseSessionBackend:
    """Remote writes issued by a workout session, bound to one request's DB session."""
    def __init__(self, db: Session):
        self.db = db

    def insert_log(self, *, exercise_id: int, user_id: int, weight: float, reps: int) -> None:
        try:
            LogRepository(self.db).create(exercise_id=exercise_id, user_id=user_id,
                                          weight=weight, reps=reps, sets=1)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SessionBackendError(f"could not insert log: {e}") from e

    def update_exercise_weight(self, exercise_id: int, weight: float) -> None:
        try:
            updated = ExerciseRepository(self.db).update_weight(exercise_id, weight)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SessionBackendError(f"could not update weight: {e}") from e
        if updated is None:
            raise SessionBackendError(f"exercise {exercise_id} no longer exists")
