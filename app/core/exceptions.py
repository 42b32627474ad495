"""Domain errors raised by the workout services.

The API layer maps each class to an HTTP status; callers embedding the
services directly catch them like any other exception.
"""

from __future__ import annotations


class WorkoutError(Exception):
    """Base for all workout-tracking errors."""

    status_code = 400


class NotFoundError(WorkoutError):
    """A referenced record does not exist (or is not owned by the user)."""

    status_code = 404

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ActiveSessionError(WorkoutError):
    """A session is already active; finish it before starting another."""

    status_code = 409


class NoActiveSessionError(WorkoutError):
    """The operation needs an open session and there is none."""

    status_code = 409


class TemplateValidationError(WorkoutError):
    """Template payload is unusable (empty name or no exercises)."""

    status_code = 422


class StoreError(WorkoutError):
    """The record store rejected or failed a call."""

    status_code = 503

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        message = f"store error during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.__cause__ = cause
