"""
Pytest fixtures for the order workflow engine tests.
"""

from typing import Any, Dict

import pytest

from orderflow.kernel.events.event_bus import EventBus
from orderflow.kernel.models.artifact import Artifact
from orderflow.kernel.store.repository import InMemoryArtifactStore
from orderflow.orchestration.coordinator import WorkflowCoordinator
from orderflow.orchestration.reactions import NotificationCenter, register_reaction_rules


COMMERCIAL_OWNER = "comercial_1"
ADMIN_OWNER = "admin_1"
WORKSHOP_OWNER = "taller_1"


@pytest.fixture
def store() -> InMemoryArtifactStore:
    """Empty in-memory artifact store."""
    return InMemoryArtifactStore()


@pytest.fixture
def bus() -> EventBus:
    """Event bus with the default recursion limit."""
    return EventBus(max_depth=8)


@pytest.fixture
def bare_coordinator(store: InMemoryArtifactStore, bus: EventBus) -> WorkflowCoordinator:
    """Coordinator without reaction rules: departments only move when told to."""
    return WorkflowCoordinator(store=store, bus=bus)


@pytest.fixture
def coordinator() -> WorkflowCoordinator:
    """Coordinator with every reaction rule registered."""
    coordinator = WorkflowCoordinator(store=InMemoryArtifactStore(), bus=EventBus(max_depth=8))
    register_reaction_rules(coordinator.bus, coordinator)
    return coordinator


@pytest.fixture
def notifications(coordinator: WorkflowCoordinator) -> NotificationCenter:
    """Notification center listening on the coordinator's bus."""
    return NotificationCenter(coordinator.bus)


# Sample data fixtures

@pytest.fixture
def proposal_data() -> Dict[str, Any]:
    """Minimal data a commercial proposal requires."""
    return {
        "customer": {"name": "Acme", "email": "a@acme.com"},
        "items": ["Widget"],
    }


@pytest.fixture
def confirmation_data() -> Dict[str, Any]:
    """Data commercial needs to confirm an order."""
    return {
        "budget": {"amount": 1000.0, "tax_rate": 21.0, "total": 1210.0},
        "requested_delivery_date": "2026-12-01",
    }


@pytest.fixture
def production_data() -> Dict[str, Any]:
    """Data admin needs to send an order to production."""
    return {
        "production_start_date": "2026-11-02",
        "workshop_owner": WORKSHOP_OWNER,
    }


@pytest.fixture
def confirmed_order(
    coordinator: WorkflowCoordinator,
    proposal_data: Dict[str, Any],
    confirmation_data: Dict[str, Any],
) -> Artifact:
    """Order confirmed by commercial (admin auto-activated)."""
    order = coordinator.create_artifact(proposal_data, COMMERCIAL_OWNER)
    return coordinator.apply_transition(
        order.id, "commercial", "confirmed", COMMERCIAL_OWNER, extra_data=confirmation_data
    )


@pytest.fixture
def order_in_production(
    coordinator: WorkflowCoordinator,
    confirmed_order: Artifact,
    production_data: Dict[str, Any],
) -> Artifact:
    """Order with admin and workshop both in production."""
    coordinator.apply_transition(
        confirmed_order.id,
        "admin",
        "pendingDocs",
        ADMIN_OWNER,
        extra_data={"required_documents": ["contract", "drawings"]},
    )
    coordinator.apply_transition(
        confirmed_order.id, "admin", "inProduction", ADMIN_OWNER, extra_data=production_data
    )
    return coordinator.apply_transition(
        confirmed_order.id,
        "workshop",
        "inProduction",
        WORKSHOP_OWNER,
        extra_data={"production_owner": WORKSHOP_OWNER, "actual_start_date": "2026-11-03T08:00:00"},
    )
