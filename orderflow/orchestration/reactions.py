"""
Cross-department reaction rules and the in-process notification center.

Rules are wired once at startup. Each one reacts to a published event by
calling back into the coordinator (which publishes again, on the same
thread) or by requesting a notification. A rule that raises is isolated by
the event bus; the transition that triggered it stays committed.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from orderflow.config import get_settings
from orderflow.kernel.events.event_bus import EventBus
from orderflow.kernel.events.event_types import NotificationEvent
from orderflow.kernel.models.base import utcnow
from orderflow.kernel.models.department import AdminState, Department, WorkshopState
from orderflow.kernel.models.event_log import EventRecord, EventType
from orderflow.logging_config import get_logger
from orderflow.orchestration.coordinator import WorkflowCoordinator
from orderflow.orchestration.machines import MACHINES

logger = get_logger(__name__)

# incident_type -> department told about an admin incident
_INCIDENT_RECIPIENTS: Dict[str, Department] = {
    "quality": Department.WORKSHOP,
    "delivery": Department.COMMERCIAL,
}


def _event_data(event: EventRecord) -> Dict[str, Any]:
    """Transition data of a department event, or the payload itself."""
    data = event.payload.get("data")
    return data if isinstance(data, dict) else event.payload


def notify(bus: EventBus, artifact_id: str, recipient: Department, kind: str, message: str) -> List[Any]:
    """Publish a notification request for a department."""
    return bus.publish(
        EventType.NOTIFICATION_REQUIRED,
        NotificationEvent(
            artifact_id=artifact_id,
            recipient=recipient.value,
            kind=kind,
            message=message,
        ),
    )


def register_reaction_rules(bus: EventBus, coordinator: WorkflowCoordinator) -> None:
    """Subscribe every reaction rule on bus. Call once per bus."""
    system_owner = get_settings().system_owner

    def activate_admin(event: EventRecord) -> Dict[str, Any]:
        artifact_id = event.payload["artifact_id"]
        artifact = coordinator.get_artifact(artifact_id)
        if artifact.state_of(Department.ADMIN) is not None:
            return {"status": "admin_already_active", "artifact_id": artifact_id}

        coordinator.apply_transition(
            artifact_id,
            Department.ADMIN,
            AdminState.CONFIRMED.value,
            system_owner,
            note="Order confirmed by commercial - automatic verification",
        )
        return {"status": "admin_activated", "artifact_id": artifact_id}

    def activate_workshop(event: EventRecord) -> Dict[str, Any]:
        artifact_id = event.payload["artifact_id"]
        artifact = coordinator.get_artifact(artifact_id)
        if artifact.state_of(Department.WORKSHOP) is not None:
            return {"status": "workshop_already_active", "artifact_id": artifact_id}

        coordinator.apply_transition(
            artifact_id,
            Department.WORKSHOP,
            WorkshopState.PENDING_DOCS.value,
            system_owner,
            note="Production order received from administration",
        )
        return {"status": "workshop_activated", "artifact_id": artifact_id}

    def deliver_to_admin(event: EventRecord) -> Dict[str, Any]:
        artifact_id = event.payload["artifact_id"]
        artifact = coordinator.get_artifact(artifact_id)
        admin_state = artifact.state_of(Department.ADMIN)
        delivered = AdminState.DELIVERED.value

        status = "admin_not_ready"
        if MACHINES[Department.ADMIN].can_transition(admin_state, delivered):
            workshop_data = artifact.department_states[Department.WORKSHOP].data
            coordinator.apply_transition(
                artifact_id,
                Department.ADMIN,
                delivered,
                system_owner,
                note="Production finished by workshop",
                extra_data={
                    "actual_delivery_date": workshop_data.get("completion_date"),
                    "customer_acceptance": _event_data(event).get("customer_acceptance"),
                },
            )
            status = "admin_notified"

        notify(bus, artifact_id, Department.ADMIN, "production_finished", "Order ready for delivery")
        return {"status": status, "artifact_id": artifact_id}

    def propagate_modification(event: EventRecord) -> Dict[str, Any]:
        artifact_id = event.payload["artifact_id"]
        modification_type = event.payload.get("modification_type") or _event_data(event).get("modification_type")
        actions = []

        if modification_type == "specifications":
            artifact = coordinator.get_artifact(artifact_id)
            if artifact.is_in(Department.WORKSHOP, WorkshopState.IN_PRODUCTION.value):
                coordinator.apply_transition(
                    artifact_id,
                    Department.WORKSHOP,
                    WorkshopState.REVISED.value,
                    system_owner,
                    note="Specification change requires review",
                    extra_data={
                        "modification_type": "specifications",
                        "production_impact": "medium",
                    },
                )
                actions.append("workshop_revision_requested")

        return {"status": "modification_processed", "actions": actions, "artifact_id": artifact_id}

    def route_admin_incident(event: EventRecord) -> Dict[str, Any]:
        artifact_id = event.payload["artifact_id"]
        incident_type = _event_data(event).get("incident_type")
        recipient = _INCIDENT_RECIPIENTS.get(incident_type)
        notified = []

        if recipient is Department.WORKSHOP:
            notify(bus, artifact_id, recipient, "incident", "Quality incident reported by administration")
            notified.append(recipient.value)
        elif recipient is Department.COMMERCIAL:
            notify(bus, artifact_id, recipient, "incident", "Delivery problem - customer needs attention")
            notified.append(recipient.value)

        return {"status": "incident_processed", "notified": notified, "artifact_id": artifact_id}

    def route_production_problem(event: EventRecord) -> Dict[str, Any]:
        artifact_id = event.payload["artifact_id"]
        notify(bus, artifact_id, Department.ADMIN, "incident", "Quality incident detected in production")
        return {"status": "incident_processed", "notified": [Department.ADMIN.value], "artifact_id": artifact_id}

    def log_state_change(event: EventRecord) -> Dict[str, Any]:
        payload = event.payload
        logger.info(
            "Order %s: %s %s -> %s",
            payload.get("artifact_id"),
            payload.get("department"),
            payload.get("from_state") or "unassigned",
            payload.get("to_state"),
        )
        return {"status": "logged", "timestamp": event.timestamp.isoformat()}

    bus.subscribe(EventType.ORDER_CONFIRMED, activate_admin)
    bus.subscribe(EventType.PRODUCTION_ORDER_SENT, activate_workshop)
    bus.subscribe(EventType.PRODUCTION_FINISHED, deliver_to_admin)
    bus.subscribe(EventType.ORDER_REVISED, propagate_modification)
    bus.subscribe(EventType.INCIDENT_DETECTED, route_admin_incident)
    bus.subscribe(EventType.PRODUCTION_PROBLEM, route_production_problem)
    bus.subscribe(EventType.STATE_CHANGED, log_state_change)


class Notification(BaseModel):
    """A message waiting for a department."""

    id: str
    timestamp: datetime = Field(default_factory=utcnow)
    recipient: str
    kind: str
    artifact_id: Optional[str] = None
    message: str
    read: bool = False


class NotificationCenter:
    """
    Collects notification requests published on the bus.

    Usage:
        center = NotificationCenter(bus)
        unread = center.for_recipient("admin", unread_only=True)
    """

    def __init__(self, bus: EventBus):
        self._notifications: List[Notification] = []
        bus.subscribe(EventType.NOTIFICATION_REQUIRED, self._on_notification)

    def _on_notification(self, event: EventRecord) -> Dict[str, Any]:
        payload = event.payload
        notification = Notification(
            id=f"notif_{uuid.uuid4().hex}",
            timestamp=event.timestamp,
            recipient=payload["recipient"],
            kind=payload.get("kind", "info"),
            artifact_id=payload.get("artifact_id"),
            message=payload.get("message", ""),
        )
        self._notifications.append(notification)
        logger.info(
            "Notification for %s: %s",
            notification.recipient,
            notification.message,
            extra={"artifact_id": notification.artifact_id},
        )
        return {"status": "notification_created", "notification_id": notification.id}

    def for_recipient(self, recipient: str, unread_only: bool = False) -> List[Notification]:
        """Notifications of one recipient, newest first."""
        matches = [
            n for n in self._notifications
            if n.recipient == recipient and not (unread_only and n.read)
        ]
        return list(reversed(matches))

    def mark_read(self, notification_id: str) -> bool:
        for notification in self._notifications:
            if notification.id == notification_id:
                notification.read = True
                return True
        return False

    def __len__(self) -> int:
        return len(self._notifications)
