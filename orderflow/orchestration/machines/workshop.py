"""
Workshop department lifecycle.

The workshop waits in pendingDocs until it starts production; delivered and
cancelled are final. No transition leads into incident; it is kept so an
order loaded with that state can still leave it.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Type

from orderflow.kernel.models.department import Department, WorkshopState
from orderflow.orchestration.machines.base import (
    DepartmentStateMachine,
    FieldDescriptor,
    FieldKind,
    FormSchema,
    Requirement,
)

S = WorkshopState

_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    S.PENDING_DOCS.value: frozenset({S.IN_PRODUCTION.value}),
    S.IN_PRODUCTION.value: frozenset({S.DELIVERED.value, S.CANCELLED.value, S.REVISED.value}),
    S.DELIVERED.value: frozenset(),
    S.CANCELLED.value: frozenset(),
    S.REVISED.value: frozenset({S.IN_PRODUCTION.value, S.CANCELLED.value}),
    S.INCIDENT.value: frozenset({S.IN_PRODUCTION.value, S.CANCELLED.value}),
}

_REQUIREMENTS: Dict[str, List[Requirement]] = {
    # pendingDocs only waits for the production order from admin
    S.IN_PRODUCTION.value: [
        Requirement(path="production_owner", message="Production owner is required"),
        Requirement(path="actual_start_date", message="Actual start date is required"),
    ],
    S.DELIVERED.value: [
        Requirement(path="quality_check", message="Quality check verdict is required"),
        Requirement(path="completion_date", message="Completion date is required"),
    ],
    S.CANCELLED.value: [
        Requirement(path="cancellation_reason", message="Cancellation reason is required"),
    ],
    S.REVISED.value: [
        Requirement(path="modification_type", message="Modification type is required"),
        Requirement(path="production_impact", message="Production impact is required"),
    ],
    S.INCIDENT.value: [
        Requirement(path="problem_detected", message="Detected problem is required"),
    ],
}

_FORMS: Dict[str, FormSchema] = {
    S.PENDING_DOCS.value: FormSchema(title="Waiting for production order"),
    S.IN_PRODUCTION.value: FormSchema(
        title="Start production",
        fields=[
            FieldDescriptor(name="production_owner", kind=FieldKind.TEXT, label="Production owner", required=True),
            FieldDescriptor(
                name="actual_start_date", kind=FieldKind.DATETIME, label="Actual start date", required=True
            ),
            FieldDescriptor(name="required_processes", kind=FieldKind.ARRAY, label="Required processes"),
            FieldDescriptor(name="assigned_materials", kind=FieldKind.TEXTAREA, label="Assigned materials"),
        ],
    ),
    S.DELIVERED.value: FormSchema(
        title="Finish and deliver",
        fields=[
            FieldDescriptor(
                name="quality_check",
                kind=FieldKind.SELECT,
                label="Quality check",
                required=True,
                options=["approved", "rejected", "conditional"],
            ),
            FieldDescriptor(name="completion_date", kind=FieldKind.DATETIME, label="Completion date", required=True),
            FieldDescriptor(name="quality_notes", kind=FieldKind.TEXTAREA, label="Quality notes"),
            FieldDescriptor(name="quality_certificates", kind=FieldKind.ARRAY, label="Quality certificates"),
            # Forwarded to admin's delivered state by the delivery reaction
            FieldDescriptor(
                name="customer_acceptance",
                kind=FieldKind.SELECT,
                label="Customer acceptance",
                options=["yes", "no", "partial"],
            ),
        ],
    ),
    S.CANCELLED.value: FormSchema(
        title="Cancel production",
        fields=[
            FieldDescriptor(
                name="cancellation_reason", kind=FieldKind.TEXTAREA, label="Cancellation reason", required=True
            ),
            FieldDescriptor(name="material_used", kind=FieldKind.NUMBER, label="Material used (%)"),
            FieldDescriptor(name="work_done", kind=FieldKind.TEXTAREA, label="Work done"),
        ],
    ),
    S.REVISED.value: FormSchema(
        title="Handle modification",
        fields=[
            FieldDescriptor(
                name="modification_type",
                kind=FieldKind.SELECT,
                label="Modification type",
                required=True,
                options=["specifications", "materials", "design", "quantity"],
            ),
            FieldDescriptor(
                name="production_impact",
                kind=FieldKind.SELECT,
                label="Production impact",
                required=True,
                options=["low", "medium", "high", "critical"],
            ),
            FieldDescriptor(name="additional_hours", kind=FieldKind.NUMBER, label="Additional time (hours)"),
            FieldDescriptor(name="additional_costs", kind=FieldKind.NUMBER, label="Additional costs"),
        ],
    ),
    S.INCIDENT.value: FormSchema(
        title="Report incident",
        fields=[
            FieldDescriptor(name="problem_detected", kind=FieldKind.TEXTAREA, label="Detected problem", required=True),
            FieldDescriptor(name="proposed_solution", kind=FieldKind.TEXTAREA, label="Proposed solution"),
            FieldDescriptor(name="downtime_hours", kind=FieldKind.NUMBER, label="Downtime (hours)"),
            FieldDescriptor(name="needs_approval", kind=FieldKind.CHECKBOX, label="Needs approval"),
        ],
    ),
}


class WorkshopStateMachine(DepartmentStateMachine):
    """Production floor: manufacturing, quality control, delivery."""

    @property
    def department(self) -> Department:
        return Department.WORKSHOP

    @property
    def state_enum(self) -> Type[Enum]:
        return WorkshopState

    @property
    def transitions(self) -> Dict[str, FrozenSet[str]]:
        return _TRANSITIONS

    @property
    def entry_states(self) -> FrozenSet[str]:
        return frozenset({S.PENDING_DOCS.value})

    @property
    def requirements(self) -> Dict[str, List[Requirement]]:
        return _REQUIREMENTS

    @property
    def forms(self) -> Dict[str, FormSchema]:
        return _FORMS
