from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints

FullName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=120)]

class ProfileUpdate(BaseModel):
    full_name: FullName | None = None
    weight: Annotated[float, Field(gt=0, le=999.99)] | None = None      # kg
    height: Annotated[float, Field(gt=0, le=999.99)] | None = None      # cm
    age: Annotated[int, Field(ge=1, le=150)] | None = None
    goal: Annotated[str, Field(max_length=500)] | None = None
    weekly_frequency: Annotated[int, Field(ge=1, le=7)] = 3

class ProfileRead(BaseModel):
    id: int
    full_name: str | None = None
    weight: float | None = None
    height: float | None = None
    age: int | None = None
    goal: str | None = None
    weekly_frequency: int
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
