class WorkflowError(Exception):
    """Base exception for workflow state violations (programmer errors)."""


class InvalidRecordError(WorkflowError):
    """Raised when a stage record violates its field invariants."""


class InvalidTransitionError(WorkflowError):
    """Raised when a transition is applied to a record in the wrong stage."""


class DuplicateIdError(WorkflowError):
    """Raised when adding a record whose id is already held by the store."""


class RecordNotFoundError(WorkflowError):
    """Raised when the store holds no record with the requested id."""
