class WorkoutError(Exception):
    """Base class for workout session domain errors."""


class ConflictError(WorkoutError):
    """A workout is already in progress."""


class NotFoundError(WorkoutError, ValueError):
    """A referenced program, day, session, log or set does not exist."""
