"""
Department State Machines - one static policy object per department.

Each machine defines:
- Legal transitions per state
- Mandatory data per target state
- Descriptive form fields per state
"""

from typing import Dict, Union

from orderflow.kernel.models.department import Department
from orderflow.orchestration.machines.admin import AdminStateMachine
from orderflow.orchestration.machines.base import (
    DepartmentStateMachine,
    FieldDescriptor,
    FieldKind,
    FormSchema,
    Requirement,
    RequirementRule,
    ValidationResult,
)
from orderflow.orchestration.machines.commercial import CommercialStateMachine
from orderflow.orchestration.machines.workshop import WorkshopStateMachine

MACHINES: Dict[Department, DepartmentStateMachine] = {
    Department.COMMERCIAL: CommercialStateMachine(),
    Department.ADMIN: AdminStateMachine(),
    Department.WORKSHOP: WorkshopStateMachine(),
}


def get_machine(department: Union[Department, str]) -> DepartmentStateMachine:
    """Machine for a department key (raises InvalidDepartmentError)."""
    return MACHINES[Department.parse(department)]


__all__ = [
    "DepartmentStateMachine",
    "FieldDescriptor",
    "FieldKind",
    "FormSchema",
    "Requirement",
    "RequirementRule",
    "ValidationResult",
    "CommercialStateMachine",
    "AdminStateMachine",
    "WorkshopStateMachine",
    "MACHINES",
    "get_machine",
]
