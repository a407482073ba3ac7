"""
Department work queues and input forms.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from orderflow.api.deps import Coordinator
from orderflow.orchestration.coordinator import DepartmentView
from orderflow.orchestration.machines import FormSchema, get_machine

router = APIRouter()


@router.get("/{department}/orders", response_model=List[DepartmentView])
async def list_department_orders(
    department: str,
    coordinator: Coordinator,
    state: Optional[str] = Query(None, description="Exact department state"),
    actionable: bool = Query(False, description="Include orders the department may start"),
):
    """Orders in a department's queue."""
    if actionable:
        return coordinator.list_actionable(department, state)
    return coordinator.list_for_department(department, state)


@router.get("/{department}/forms/{state}", response_model=FormSchema)
async def get_state_form(department: str, state: str):
    """Input fields a department fills in to reach state."""
    machine = get_machine(department)
    if not machine.is_known_state(state):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown state {state} for {machine.department.value}",
        )
    return machine.form_for(state)
