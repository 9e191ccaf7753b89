"""
Domain errors.

Every error raised by the scheduling core is an ``OrchestrationError``
tagged with an ``ErrorKind``. Transport layers map the kind to their own
status codes; the core never deals in HTTP statuses.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error categories."""

    VALIDATION = "validation"
    STATE = "state"
    NOT_FOUND = "not_found"
    DISPATCH = "dispatch"
    INTERNAL = "internal"


class OrchestrationError(Exception):
    """Base error carrying a kind discriminant and a readable message."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(OrchestrationError):
    """Malformed or cyclic workflow, or a bad request shape."""

    kind = ErrorKind.VALIDATION


class StateError(OrchestrationError):
    """Operation not allowed in the current task state."""

    kind = ErrorKind.STATE


class NotFoundError(OrchestrationError):
    """Unknown task, step or agent id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, id: str):
        super().__init__(f"{resource} not found with id {id}")
        self.resource = resource
        self.id = id


class DispatchError(OrchestrationError):
    """No eligible worker, or the worker hand-off failed."""

    kind = ErrorKind.DISPATCH
