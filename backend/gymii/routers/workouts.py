from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from gymii.db import get_db
from gymii.models import User, Workout
from gymii.schemas.workout import (
    ExerciseRead,
    ExerciseWrite,
    WorkoutDetailRead,
    WorkoutSummaryRead,
    WorkoutWrite,
)
from gymii.repositories.exercise_repo import ExerciseRepository
from gymii.repositories.workout_repo import WorkoutRepository
from gymii.deps.auth import get_current_user
from gymii.deps.sessions import get_session_manager
from gymii.training.manager import SessionManager

router = APIRouter(tags=["workouts"])

def _owned_workout(workout_id: int, db: Session, current: User):
    workout = WorkoutRepository(db).get_owned(workout_id, current.id)
    if not workout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return workout

def _refresh_session(manager: SessionManager, db: Session, current: User, workout: Workout) -> None:
    exercises = ExerciseRepository(db).session_exercises(workout.id)
    manager.refresh(current.id, workout.id, workout.name, exercises)

@router.get("/workouts", response_model=list[WorkoutSummaryRead])
def list_workouts(
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    repo = WorkoutRepository(db)
    page = repo.list_by_user(current.id, limit=limit, offset=offset)
    counts = repo.count_exercises([w.id for w in page.items])
    return [
        WorkoutSummaryRead.model_validate(w).model_copy(update={"exercises_count": counts.get(w.id, 0)})
        for w in page.items
    ]

@router.post("/workouts", response_model=WorkoutDetailRead, status_code=status.HTTP_201_CREATED)
def create_workout(payload: WorkoutWrite, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return WorkoutRepository(db).create(current.id, name=payload.name, muscle_group=payload.muscle_group)

@router.get("/workouts/{workout_id}", response_model=WorkoutDetailRead)
def get_workout(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return _owned_workout(workout_id, db, current)

@router.put("/workouts/{workout_id}", response_model=WorkoutDetailRead)
def update_workout(
    workout_id: int,
    payload: WorkoutWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    workout = _owned_workout(workout_id, db, current)
    workout = WorkoutRepository(db).update(workout, name=payload.name, muscle_group=payload.muscle_group)
    _refresh_session(manager, db, current, workout)
    return workout

@router.delete("/workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(
    workout_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    workout = _owned_workout(workout_id, db, current)
    WorkoutRepository(db).delete(workout)
    # a stored session of a deleted workout can never be resumed
    manager.discard(current.id, workout_id)

# ---- exercises ----

@router.get("/workouts/{workout_id}/exercises", response_model=list[ExerciseRead])
def list_exercises(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    workout = _owned_workout(workout_id, db, current)
    return ExerciseRepository(db).list_by_workout(workout.id)

@router.post("/workouts/{workout_id}/exercises", response_model=ExerciseRead,
             status_code=status.HTTP_201_CREATED)
def create_exercise(
    workout_id: int,
    payload: ExerciseWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    workout = _owned_workout(workout_id, db, current)
    exercise = ExerciseRepository(db).create(workout, **payload.model_dump())
    _refresh_session(manager, db, current, workout)
    return exercise

@router.put("/exercises/{exercise_id}", response_model=ExerciseRead)
def update_exercise(
    exercise_id: int,
    payload: ExerciseWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    repo = ExerciseRepository(db)
    exercise = repo.get_owned(exercise_id, current.id)
    if not exercise:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    exercise = repo.update(exercise, **payload.model_dump())
    _refresh_session(manager, db, current, exercise.workout)
    return exercise

@router.delete("/exercises/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exercise(
    exercise_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    repo = ExerciseRepository(db)
    exercise = repo.get_owned(exercise_id, current.id)
    if not exercise:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    workout = exercise.workout
    repo.delete(exercise)
    _refresh_session(manager, db, current, workout)
