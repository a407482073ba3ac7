"""
Immutable event log entries and the event type catalogue.

The identifiers below are the integration surface for any external
notification collaborator; they must not change.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from orderflow.kernel.models.base import utcnow
from orderflow.kernel.models.department import AdminState, CommercialState, Department, WorkshopState


class EventType(str, Enum):
    """All event types published on the bus."""

    # Commercial events
    ORDER_PROPOSED = "commercial.order.proposed"
    ORDER_CONFIRMED = "commercial.order.confirmed"
    ORDER_REVISED = "commercial.order.revised"
    ORDER_CANCELLED_COMMERCIAL = "commercial.order.cancelled"

    # Admin events
    DOCUMENTATION_VERIFIED = "admin.documentation.verified"
    PRODUCTION_ORDER_SENT = "admin.production_order.sent"
    ORDER_DELIVERED = "admin.order.delivered"
    INVOICE_CREATED = "admin.invoice.created"
    PAYMENT_RECORDED = "admin.payment.recorded"
    INCIDENT_DETECTED = "admin.incident.detected"

    # Workshop events
    PRODUCTION_STARTED = "workshop.production.started"
    PRODUCTION_FINISHED = "workshop.production.finished"
    REVISION_REQUIRED = "workshop.revision.required"
    PRODUCTION_PROBLEM = "workshop.problem.detected"

    # System events
    STATE_CHANGED = "system.state.changed"
    NOTIFICATION_REQUIRED = "system.notification.required"


# Department + target state pairs that emit a specific event
SPECIFIC_EVENTS: Dict[Tuple[Department, str], EventType] = {
    (Department.COMMERCIAL, CommercialState.CONFIRMED.value): EventType.ORDER_CONFIRMED,
    (Department.COMMERCIAL, CommercialState.REVISED.value): EventType.ORDER_REVISED,
    (Department.COMMERCIAL, CommercialState.CANCELLED.value): EventType.ORDER_CANCELLED_COMMERCIAL,
    (Department.ADMIN, AdminState.PENDING_DOCS.value): EventType.DOCUMENTATION_VERIFIED,
    (Department.ADMIN, AdminState.IN_PRODUCTION.value): EventType.PRODUCTION_ORDER_SENT,
    (Department.ADMIN, AdminState.DELIVERED.value): EventType.ORDER_DELIVERED,
    (Department.ADMIN, AdminState.INVOICED.value): EventType.INVOICE_CREATED,
    (Department.ADMIN, AdminState.PAID.value): EventType.PAYMENT_RECORDED,
    (Department.ADMIN, AdminState.INCIDENT.value): EventType.INCIDENT_DETECTED,
    (Department.WORKSHOP, WorkshopState.IN_PRODUCTION.value): EventType.PRODUCTION_STARTED,
    (Department.WORKSHOP, WorkshopState.DELIVERED.value): EventType.PRODUCTION_FINISHED,
    (Department.WORKSHOP, WorkshopState.REVISED.value): EventType.REVISION_REQUIRED,
    (Department.WORKSHOP, WorkshopState.INCIDENT.value): EventType.PRODUCTION_PROBLEM,
}


def specific_event_for(department: Department, to_state: str) -> Optional[EventType]:
    """Specific event for a department reaching to_state, if one is registered."""
    return SPECIFIC_EVENTS.get((department, to_state))


class EventRecord(BaseModel):
    """
    Immutable entry of the event log.

    The log is append-only: records are frozen and the bus only ever hands
    out copies of the sequence.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"<EventRecord {self.type} {self.id}>"
