from __future__ import annotations


class WorkflowError(Exception):
    """Base class for approval workflow failures.

    ``kind`` is the machine-readable name surfaced to API clients; the
    message is shown to users verbatim.
    """

    kind = "WorkflowError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedStage(WorkflowError):
    """The acting role does not match the stage awaiting a decision."""

    kind = "UnauthorizedStage"


class InvalidTransition(WorkflowError):
    """The workflow is terminal or the decision is not a valid transition."""

    kind = "InvalidTransition"


class NotFound(WorkflowError):
    kind = "NotFound"


class PersistenceError(WorkflowError):
    """The store failed; nothing was applied and the whole call may be retried."""

    kind = "PersistenceError"
