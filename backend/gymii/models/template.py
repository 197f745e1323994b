from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, JSON, DateTime, func
from gymii.db import Base

class WorkoutTemplate(Base):
    """Read-only catalog entry, cloned into a user's workout on import."""
    __tablename__ = "workout_templates"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    muscle_groups: Mapped[list] = mapped_column(JSON, nullable=False)
    intensity: Mapped[str | None] = mapped_column(String(60), nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True, default=60)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    exercises: Mapped[list] = mapped_column(JSON, nullable=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
