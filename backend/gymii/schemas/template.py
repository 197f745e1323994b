from pydantic import BaseModel

from gymii.schemas.workout import SetPlanEntryRead

class TemplateExerciseRead(BaseModel):
    name: str
    rest_seconds: int | None = None
    effort: str | None = None
    set_plan: list[SetPlanEntryRead] = []

    model_config = {"from_attributes": True}

class TemplateRead(BaseModel):
    slug: str
    name: str
    description: str | None = None
    muscle_groups: list[str]
    intensity: str | None = None
    rest_seconds: int | None = None
    duration_minutes: int | None = None
    exercises: list[TemplateExerciseRead]

    model_config = {"from_attributes": True}
