from gymii.models.user import User
from gymii.models.profile import Profile
from gymii.models.workout import Workout
from gymii.models.exercise import Exercise
from gymii.models.workout_log import WorkoutLog
from gymii.models.template import WorkoutTemplate

__all__ = ["User", "Profile", "Workout", "Exercise", "WorkoutLog", "WorkoutTemplate"]
