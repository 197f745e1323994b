from pydantic import BaseModel, Field

from gymii.training.timer import SessionStatus

class RestTimerRead(BaseModel):
    duration: int
    remaining: int
    active: bool

    model_config = {"from_attributes": True}

class ExerciseProgressRead(BaseModel):
    id: int
    name: str
    order_index: int
    sets: int
    completed_sets: int
    reps: int
    next_reps: int | None = None
    weight: float
    default_weight: float
    rest_seconds: int
    rest: RestTimerRead
    saving: bool
    finished: bool

    model_config = {"from_attributes": True}

class SessionStateRead(BaseModel):
    workout_id: int
    workout_name: str | None = None
    status: SessionStatus
    elapsed_seconds: int
    session_start: float | None = None
    session_end: float | None = None
    volume: float
    total_sets: int
    completed_sets: int
    percentage: int
    total_exercises: int
    completed_exercises: int
    pending_sets: int
    workout_finished: bool
    active_exercise_id: int | None = None
    focus_exercise_id: int | None = None
    exercises: list[ExerciseProgressRead]

    model_config = {"from_attributes": True}

class SetLoggedRead(BaseModel):
    logged: bool
    state: SessionStateRead

class WeightWrite(BaseModel):
    # null restores the planned weight
    weight: float | None = Field(default=None, ge=0, le=9999.99)

class WeightAdjust(BaseModel):
    delta: float = Field(ge=-1000, le=1000)

class FocusWrite(BaseModel):
    exercise_id: int | None = None

class ConfirmWrite(BaseModel):
    confirm: bool = False

class SessionSummaryRead(BaseModel):
    workout_id: int
    duration_seconds: int
    volume: float
    completed_sets: int
    total_sets: int

    model_config = {"from_attributes": True}

class ActiveSessionRead(BaseModel):
    workout_id: int
    workout_name: str | None = None
    session_start: float | None = None
    last_updated: float

    model_config = {"from_attributes": True}
