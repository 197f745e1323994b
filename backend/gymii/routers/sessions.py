import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from gymii.db import get_db
from gymii.models import User
from gymii.schemas.session import (
    ActiveSessionRead,
    ConfirmWrite,
    FocusWrite,
    SessionStateRead,
    SessionSummaryRead,
    SetLoggedRead,
    WeightAdjust,
    WeightWrite,
)
from gymii.repositories.exercise_repo import ExerciseRepository
from gymii.repositories.session_backend import DatabaseSessionBackend
from gymii.repositories.workout_repo import WorkoutRepository
from gymii.deps.auth import get_current_user
from gymii.deps.sessions import get_session_manager
from gymii.settings import get_settings
from gymii.training.controller import WorkoutSessionController
from gymii.training.errors import (
    ConfirmationRequired,
    ExerciseNotFound,
    SessionError,
    SetLogFailed,
)
from gymii.training.manager import SessionManager

log = logging.getLogger("uvicorn")

router = APIRouter(tags=["sessions"])

def _http_error(err: SessionError) -> HTTPException:
    if isinstance(err, ExerciseNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=err.message)
    if isinstance(err, SetLogFailed):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=err.message)
    if isinstance(err, ConfirmationRequired):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": err.message,
                "pending_sets": err.pending_sets,
                "pending_exercises": err.pending_exercises,
            },
        )
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=err.message)

def _mount(
    workout_id: int,
    db: Session,
    current: User,
    manager: SessionManager,
    confirm_leave: bool = False,
) -> WorkoutSessionController:
    """Return the session of the workout, mounted from the current exercise rows."""
    workout = WorkoutRepository(db).get_owned(workout_id, current.id)
    if not workout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    exercises = ExerciseRepository(db).session_exercises(workout.id)
    try:
        controller = manager.attach(current.id, workout.id, workout.name, exercises,
                                    confirm_leave=confirm_leave)
    except SessionError as e:
        raise _http_error(e)
    controller.catch_up()
    return controller

@router.get("/workouts/{workout_id}/session", response_model=SessionStateRead)
def get_session(
    workout_id: int,
    confirm_leave: bool = Query(False),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    return _mount(workout_id, db, current, manager, confirm_leave).describe()

@router.post("/workouts/{workout_id}/session/start", response_model=SessionStateRead)
def start_session(
    workout_id: int,
    confirm_leave: bool = Query(False),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    controller = _mount(workout_id, db, current, manager, confirm_leave)
    try:
        controller.start()
    except SessionError as e:
        raise _http_error(e)
    log.info("Started workout session user=%s workout=%s", current.id, workout_id)
    return controller.describe()

@router.post("/workouts/{workout_id}/session/sets/{exercise_id}", response_model=SetLoggedRead)
def complete_set(
    workout_id: int,
    exercise_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    controller = _mount(workout_id, db, current, manager)
    try:
        logged = controller.complete_set(exercise_id, DatabaseSessionBackend(db))
    except SessionError as e:
        raise _http_error(e)
    return {"logged": logged, "state": controller.describe()}

@router.put("/workouts/{workout_id}/session/weights/{exercise_id}", response_model=SessionStateRead)
def set_weight(
    workout_id: int,
    exercise_id: int,
    payload: WeightWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    controller = _mount(workout_id, db, current, manager)
    try:
        controller.set_weight(exercise_id, payload.weight)
    except SessionError as e:
        raise _http_error(e)
    return controller.describe()

@router.post("/workouts/{workout_id}/session/weights/{exercise_id}/adjust", response_model=SessionStateRead)
def adjust_weight(
    workout_id: int,
    exercise_id: int,
    payload: WeightAdjust,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    controller = _mount(workout_id, db, current, manager)
    try:
        controller.adjust_weight(exercise_id, payload.delta)
    except SessionError as e:
        raise _http_error(e)
    return controller.describe()

@router.put("/workouts/{workout_id}/session/focus", response_model=SessionStateRead)
def select_exercise(
    workout_id: int,
    payload: FocusWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    controller = _mount(workout_id, db, current, manager)
    try:
        controller.select_exercise(payload.exercise_id)
    except SessionError as e:
        raise _http_error(e)
    return controller.describe()

@router.post("/workouts/{workout_id}/session/finish", response_model=SessionSummaryRead)
def finish_session(
    workout_id: int,
    payload: ConfirmWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    _mount(workout_id, db, current, manager)
    try:
        summary = manager.finalize(current.id, workout_id, DatabaseSessionBackend(db), confirm=payload.confirm)
    except SessionError as e:
        raise _http_error(e)
    if summary is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Workout session is not open")
    return summary

@router.post("/workouts/{workout_id}/session/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_session(
    workout_id: int,
    payload: ConfirmWrite,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    if not WorkoutRepository(db).get_owned(workout_id, current.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    try:
        manager.leave(current.id, workout_id, confirm=payload.confirm)
    except SessionError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/workouts/{workout_id}/session", status_code=status.HTTP_204_NO_CONTENT)
def discard_session(
    workout_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    if not WorkoutRepository(db).get_owned(workout_id, current.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    manager.discard(current.id, workout_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/sessions/active", response_model=ActiveSessionRead | None)
def active_session(
    current: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    """Most recent in-progress session still inside the resume window, if any."""
    max_age = timedelta(hours=get_settings().SESSION_RESUME_MAX_AGE_HOURS)
    return manager.find_resumable(current.id, max_age=max_age)
