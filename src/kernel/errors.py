"""
Workflow error taxonomy.

All of these are recoverable by the caller: the request fails, the entry is
left unchanged, and the message is shown to the user. Nothing here is
retried automatically.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for errors raised by the workflow core."""

    code: str = "workflow_error"
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(WorkflowError):
    """The acting identity could not be resolved."""

    code = "unauthorized"
    status_code = 401


class ForbiddenError(WorkflowError):
    """The actor's role lacks the capability required for the operation."""

    code = "forbidden"
    status_code = 403


class InvalidTransitionError(WorkflowError):
    """No edge exists from the entry's current status to the target."""

    code = "invalid_transition"
    status_code = 409

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Invalid transition: {from_status} -> {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class ValidationError(WorkflowError):
    """Required input (e.g. a rejection reason) is missing or malformed."""

    code = "validation_error"
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(WorkflowError):
    """The referenced entry or role assignment does not exist."""

    code = "not_found"
    status_code = 404


class ConflictError(WorkflowError):
    """
    The conditional write lost a race: the stored status no longer matched
    the status the caller read. Re-fetch and decide again.
    """

    code = "conflict"
    status_code = 409

    def __init__(self, entry_id: str, expected_status: str):
        super().__init__(
            f"Entry {entry_id} is no longer in status '{expected_status}'"
        )
        self.entry_id = entry_id
        self.expected_status = expected_status


class StorageError(WorkflowError):
    """Unexpected failure in the storage layer. Try again later."""

    code = "storage_unavailable"
    status_code = 503
