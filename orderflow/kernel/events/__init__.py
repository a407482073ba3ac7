"""
Event infrastructure.

Provides the synchronous event bus with its append-only log and the payload
schemas of every published event.
"""

from orderflow.kernel.events.event_bus import EventBus, EventHandler
from orderflow.kernel.events.event_types import (
    ArtifactProposedEvent,
    BaseEvent,
    DepartmentTransitionEvent,
    NotificationEvent,
    OrderModifiedEvent,
    StateChangedEvent,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "BaseEvent",
    "ArtifactProposedEvent",
    "StateChangedEvent",
    "DepartmentTransitionEvent",
    "OrderModifiedEvent",
    "NotificationEvent",
]
