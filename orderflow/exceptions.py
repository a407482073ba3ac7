"""
Domain errors raised by the workflow engine.

Every error is raised before the artifact or the event log is touched, so a
rejected operation leaves no trace besides a log line.
"""

from typing import List, Optional


class WorkflowError(Exception):
    """Base class for all workflow engine errors."""


class NotFoundError(WorkflowError):
    """Unknown artifact id."""

    def __init__(self, artifact_id: str):
        self.artifact_id = artifact_id
        super().__init__(f"Order {artifact_id} not found")


class InvalidDepartmentError(WorkflowError):
    """Unknown department key."""

    def __init__(self, department: object):
        self.department = department
        super().__init__(f"Department {department!r} is not valid")


class TransitionError(WorkflowError):
    """Illegal from_state -> to_state move for a department."""

    def __init__(
        self,
        department: str,
        from_state: Optional[str],
        to_state: str,
        reason: Optional[str] = None,
    ):
        self.department = department
        self.from_state = from_state
        self.to_state = to_state
        message = f"Transition not allowed: {from_state or 'unassigned'} -> {to_state} in {department}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ValidationError(WorkflowError):
    """Missing or invalid data for the target state."""

    def __init__(self, state: str, errors: List[str], department: Optional[str] = None):
        self.state = state
        self.department = department
        self.errors = list(errors)
        super().__init__(f"Insufficient data for state {state}: {', '.join(self.errors)}")
