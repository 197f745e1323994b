class SessionError(Exception):
    """Base class for workout session errors shown to the user."""

    message = "Workout session error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ExerciseNotFound(SessionError):
    message = "Exercise not found in this workout"


class SessionNotStarted(SessionError):
    message = "Start the workout before logging or finishing sets"


class SessionStateError(SessionError):
    message = "Workout session cannot do that right now"


class ExerciseAlreadyFinished(SessionError):
    message = "All sets of this exercise are already done"


class SetLogFailed(SessionError):
    """The set could not be recorded; the user may try again."""

    message = "Could not log the set. Try again."


class ConfirmationRequired(SessionError):
    message = "Workout still has pending sets"

    def __init__(self, pending_sets: int, pending_exercises: int):
        super().__init__(
            f"{pending_sets} set(s) in {pending_exercises} exercise(s) are still pending"
        )
        self.pending_sets = pending_sets
        self.pending_exercises = pending_exercises


class LeaveConfirmationRequired(SessionError):
    message = "Workout in progress. Confirm to leave the session."


class SessionBackendError(Exception):
    """Raised by a session backend when a remote write fails."""
