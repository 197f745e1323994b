from datetime import date
from pydantic import BaseModel

from gymii.schemas.workout import WorkoutSummaryRead

class DashboardRead(BaseModel):
    workouts_count: int
    workouts: list[WorkoutSummaryRead]

class ProgressSummaryRead(BaseModel):
    total_volume: float
    total_sets: int
    total_sessions: int

    model_config = {"from_attributes": True}

class WeeklyVolumeRead(BaseModel):
    label: str
    week_start: date
    volume: int

    model_config = {"from_attributes": True}

class MuscleShareRead(BaseModel):
    muscle: str
    volume: float
    percentage: float

    model_config = {"from_attributes": True}

class ExerciseShareRead(BaseModel):
    name: str
    volume: float
    percentage: float
    sessions: int

    model_config = {"from_attributes": True}

class RecentSessionRead(BaseModel):
    date: date
    label: str
    volume: float
    exercises: list[str]

    model_config = {"from_attributes": True}

class ProgressRead(BaseModel):
    has_logs: bool
    summary: ProgressSummaryRead
    weekly_trend: list[WeeklyVolumeRead]
    muscle_distribution: list[MuscleShareRead]
    top_exercises: list[ExerciseShareRead]
    recent_sessions: list[RecentSessionRead]

    model_config = {"from_attributes": True}
