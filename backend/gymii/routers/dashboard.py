from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from gymii.db import get_db
from gymii.models import User
from gymii.schemas.dashboard import DashboardRead, ProgressRead
from gymii.schemas.workout import WorkoutSummaryRead
from gymii.repositories.log_repo import LogRepository
from gymii.repositories.workout_repo import WorkoutRepository
from gymii.deps.auth import get_current_user
from gymii.training.progress import DATA_WINDOW_DAYS, compute_progress

router = APIRouter(tags=["dashboard"])

@router.get("/dashboard", response_model=DashboardRead)
def dashboard(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    repo = WorkoutRepository(db)
    page = repo.list_by_user(current.id, newest_first=False, limit=200)
    counts = repo.count_exercises([w.id for w in page.items])
    workouts = [
        WorkoutSummaryRead.model_validate(w).model_copy(update={"exercises_count": counts.get(w.id, 0)})
        for w in page.items
    ]
    return {"workouts_count": page.total, "workouts": workouts}

@router.get("/progress", response_model=ProgressRead)
def progress(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    now = datetime.now(timezone.utc)
    logs = LogRepository(db).records_since(current.id, now - timedelta(days=DATA_WINDOW_DAYS))
    return compute_progress(logs, now=now)
