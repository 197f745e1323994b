from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, String, Numeric, JSON, DateTime, func
from gymii.db import Base

class Exercise(Base):
    __tablename__ = "exercises"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Numeric(6, 2), nullable=False, default=0, server_default="0")
    rest_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=60, server_default="60")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    set_plan: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    workout = relationship("Workout", back_populates="exercises")
    logs = relationship("WorkoutLog", back_populates="exercise", cascade="all, delete-orphan")
