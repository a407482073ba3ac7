"""
Order endpoints.

Domain errors raised by the coordinator are turned into responses by the
exception handlers installed in main.create_app.
"""

from fastapi import APIRouter, Response, status

from orderflow.api.deps import Coordinator
from orderflow.kernel.models.artifact import Artifact
from orderflow.orchestration.coordinator import DepartmentView
from orderflow.schemas.order import (
    EligibilityResponse,
    OrderCreate,
    PartialUpdateRequest,
    PartialUpdateResponse,
    TransitionRequest,
)

router = APIRouter()


@router.post("", response_model=Artifact, status_code=status.HTTP_201_CREATED)
async def create_order(data: OrderCreate, coordinator: Coordinator):
    """Create an order in the commercial proposed state."""
    return coordinator.create_artifact(data.data, data.commercial_owner)


@router.get("/{artifact_id}", response_model=Artifact)
async def get_order(artifact_id: str, coordinator: Coordinator):
    """Get an order with its department states and history."""
    return coordinator.get_artifact(artifact_id)


@router.delete("/{artifact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(artifact_id: str, coordinator: Coordinator):
    """Hard delete (data-reset tooling)."""
    coordinator.delete_artifact(artifact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{artifact_id}/transitions", response_model=Artifact)
async def apply_transition(artifact_id: str, data: TransitionRequest, coordinator: Coordinator):
    """Move one department of an order to a new state."""
    return coordinator.apply_transition(
        artifact_id,
        data.department,
        data.to_state,
        data.owner,
        note=data.note,
        extra_data=data.data,
    )


@router.patch("/{artifact_id}", response_model=PartialUpdateResponse)
async def partial_update(artifact_id: str, data: PartialUpdateRequest, coordinator: Coordinator):
    """Edit shared order attributes without changing any state."""
    order, affected = coordinator.apply_partial_update(
        artifact_id,
        data.modification_type,
        data.changes,
        data.owner,
    )
    return PartialUpdateResponse(order=order, affected_departments=affected)


@router.get("/{artifact_id}/eligibility", response_model=EligibilityResponse)
async def get_eligibility(artifact_id: str, coordinator: Coordinator):
    """Which departments can currently act on the order."""
    return EligibilityResponse(
        artifact_id=artifact_id,
        departments=coordinator.eligible_departments(artifact_id),
    )


@router.get("/{artifact_id}/views/{department}", response_model=DepartmentView)
async def get_department_view(artifact_id: str, department: str, coordinator: Coordinator):
    """The order as seen by one department."""
    return coordinator.department_view(artifact_id, department)
