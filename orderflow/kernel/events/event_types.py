"""
Event payload definitions using Pydantic for validation.

These are the payload schemas published on the event bus.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseEvent(BaseModel):
    """Base event payload structure."""

    model_config = ConfigDict(extra="allow")

    artifact_id: str


class ArtifactProposedEvent(BaseEvent):
    """A new order entered the commercial lifecycle."""

    owner: Optional[str] = None
    artifact: Dict[str, Any]


class StateChangedEvent(BaseEvent):
    """Generic event emitted for every accepted transition."""

    department: str
    from_state: Optional[str] = None
    to_state: str
    owner: Optional[str] = None
    note: str = ""


class DepartmentTransitionEvent(BaseEvent):
    """Specific event for a recognized department + state pair."""

    department: str
    state: str
    owner: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class OrderModifiedEvent(BaseEvent):
    """Shared attributes of an order were edited outside a transition."""

    modification_type: str
    origin_department: str = "commercial"
    affected_departments: List[str] = Field(default_factory=list)
    changes: Dict[str, Any] = Field(default_factory=dict)


class NotificationEvent(BaseEvent):
    """A department should be told about something."""

    recipient: str
    kind: str
    message: str
