from typing import Annotated, Any
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints, field_validator

from gymii.training.plans import parse_set_plan, plan_to_json

WorkoutName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
MuscleGroup = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
ExerciseName = Annotated[str, Field(max_length=120)]
PosInt = Annotated[int, Field(ge=1)]
NonNegInt = Annotated[int, Field(ge=0)]
Weight = Annotated[float, Field(ge=0, le=9999.99)]

class WorkoutWrite(BaseModel):
    name: WorkoutName
    muscle_group: MuscleGroup

class WorkoutRead(BaseModel):
    id: int
    name: str
    muscle_group: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}

class WorkoutSummaryRead(WorkoutRead):
    exercises_count: int = 0

class SetPlanEntryRead(BaseModel):
    set: int
    reps: int | None = None
    weight: float | None = None

    model_config = {"from_attributes": True}

class ExerciseWrite(BaseModel):
    name: ExerciseName
    sets: PosInt
    reps: PosInt
    weight: Weight = 0
    rest_seconds: NonNegInt = 60

    @field_validator("name")
    @classmethod
    def name_non_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name cannot be blank")
        return v2

class ExerciseRead(BaseModel):
    id: int
    workout_id: int
    name: str
    sets: int
    reps: int
    weight: float
    rest_seconds: int
    order_index: int
    set_plan: list[SetPlanEntryRead] | None = None

    model_config = {"from_attributes": True}

    @field_validator("set_plan", mode="before")
    @classmethod
    def parse_plan(cls, v: Any) -> Any:
        # stored JSON is not trusted
        if v is None:
            return None
        return plan_to_json(parse_set_plan(v))

class WorkoutDetailRead(WorkoutRead):
    exercises: list[ExerciseRead] = []
