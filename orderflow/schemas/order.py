"""
Order schemas.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from orderflow.kernel.models.artifact import Artifact
from orderflow.kernel.models.department import Department


class OrderCreate(BaseModel):
    """Order creation request."""

    commercial_owner: Optional[str] = Field(None, max_length=255)
    data: Dict[str, Any] = Field(default_factory=dict)


class TransitionRequest(BaseModel):
    """Department transition request."""

    department: str
    to_state: str
    owner: Optional[str] = Field(None, max_length=255)
    note: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)


class PartialUpdateRequest(BaseModel):
    """Edit of shared order attributes outside a transition."""

    modification_type: str
    changes: Dict[str, Any]
    owner: Optional[str] = Field(None, max_length=255)


class PartialUpdateResponse(BaseModel):
    """Partial update result."""

    order: Artifact
    affected_departments: List[Department]


class EligibilityResponse(BaseModel):
    """Which departments can act on an order."""

    artifact_id: str
    departments: Dict[Department, bool]


class StateCountsResponse(BaseModel):
    """Orders per department and state."""

    total: int
    by_department: Dict[str, Dict[str, int]]
    completed: int
    in_progress: int
