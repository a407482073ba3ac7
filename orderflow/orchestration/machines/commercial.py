"""
Commercial department lifecycle.

proposed -> confirmed -> (revised | onHold) -> confirmed ... ; cancelled is final.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Type

from orderflow.kernel.models.department import CommercialState, Department, Priority
from orderflow.orchestration.machines.base import (
    DepartmentStateMachine,
    FieldDescriptor,
    FieldKind,
    FormSchema,
    Requirement,
    RequirementRule,
)

S = CommercialState

_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    S.PROPOSED.value: frozenset({S.CONFIRMED.value, S.CANCELLED.value}),
    S.CONFIRMED.value: frozenset({S.REVISED.value, S.ON_HOLD.value, S.CANCELLED.value}),
    S.REVISED.value: frozenset({S.CONFIRMED.value, S.CANCELLED.value}),
    S.ON_HOLD.value: frozenset({S.CONFIRMED.value, S.CANCELLED.value}),
    S.CANCELLED.value: frozenset(),
}

_REQUIREMENTS: Dict[str, List[Requirement]] = {
    S.PROPOSED.value: [
        Requirement(path="customer.name", message="Customer name is required"),
        Requirement(path="customer.email", message="Customer email is required"),
        Requirement(path="items", message="At least one item must be requested"),
    ],
    S.CONFIRMED.value: [
        Requirement(
            path="budget.total",
            message="Budget total (budget.total) is required and must be greater than 0",
            rule=RequirementRule.POSITIVE,
        ),
        Requirement(path="requested_delivery_date", message="Requested delivery date is required"),
    ],
    S.REVISED.value: [
        Requirement(path="revision_reason", message="Revision reason is required"),
        Requirement(path="changes_made", message="Description of the changes is required"),
    ],
    S.ON_HOLD.value: [
        Requirement(path="hold_reason", message="Hold reason is required"),
    ],
    S.CANCELLED.value: [
        Requirement(path="cancellation_reason", message="Cancellation reason is required"),
    ],
}

_FORMS: Dict[str, FormSchema] = {
    S.PROPOSED.value: FormSchema(
        title="Create proposal",
        fields=[
            FieldDescriptor(name="customer.name", kind=FieldKind.TEXT, label="Customer name", required=True),
            FieldDescriptor(name="customer.email", kind=FieldKind.EMAIL, label="Customer email", required=True),
            FieldDescriptor(name="customer.phone", kind=FieldKind.PHONE, label="Phone"),
            FieldDescriptor(name="customer.company", kind=FieldKind.TEXT, label="Company"),
            FieldDescriptor(name="items", kind=FieldKind.ARRAY, label="Items", required=True),
            FieldDescriptor(name="specification", kind=FieldKind.TEXTAREA, label="Specification", required=True),
        ],
    ),
    S.CONFIRMED.value: FormSchema(
        title="Confirm order",
        fields=[
            FieldDescriptor(name="budget.total", kind=FieldKind.NUMBER, label="Budget total", required=True),
            FieldDescriptor(
                name="requested_delivery_date", kind=FieldKind.DATE, label="Delivery date", required=True
            ),
            FieldDescriptor(
                name="priority",
                kind=FieldKind.SELECT,
                label="Priority",
                options=[p.value for p in Priority],
            ),
        ],
    ),
    S.REVISED.value: FormSchema(
        title="Record revision",
        fields=[
            FieldDescriptor(name="revision_reason", kind=FieldKind.TEXTAREA, label="Revision reason", required=True),
            FieldDescriptor(name="changes_made", kind=FieldKind.TEXTAREA, label="Changes made", required=True),
        ],
    ),
    S.ON_HOLD.value: FormSchema(
        title="Put on hold",
        fields=[
            FieldDescriptor(name="hold_reason", kind=FieldKind.TEXTAREA, label="Hold reason", required=True),
            FieldDescriptor(name="review_date", kind=FieldKind.DATE, label="Review date"),
        ],
    ),
    S.CANCELLED.value: FormSchema(
        title="Cancel order",
        fields=[
            FieldDescriptor(
                name="cancellation_reason", kind=FieldKind.TEXTAREA, label="Cancellation reason", required=True
            ),
        ],
    ),
}


class CommercialStateMachine(DepartmentStateMachine):
    """Sales side: proposal, confirmation, revisions and holds."""

    @property
    def department(self) -> Department:
        return Department.COMMERCIAL

    @property
    def state_enum(self) -> Type[Enum]:
        return CommercialState

    @property
    def transitions(self) -> Dict[str, FrozenSet[str]]:
        return _TRANSITIONS

    @property
    def entry_states(self) -> FrozenSet[str]:
        return frozenset({S.PROPOSED.value})

    @property
    def requirements(self) -> Dict[str, List[Requirement]]:
        return _REQUIREMENTS

    @property
    def forms(self) -> Dict[str, FormSchema]:
        return _FORMS
