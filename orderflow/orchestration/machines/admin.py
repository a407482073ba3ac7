"""
Administrative department lifecycle.

Starts once commercial confirms the order; ends when the order is paid or
cancelled. Incidents can be raised during production or after delivery.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Type

from orderflow.kernel.models.department import AdminState, Department
from orderflow.orchestration.machines.base import (
    DepartmentStateMachine,
    FieldDescriptor,
    FieldKind,
    FormSchema,
    Requirement,
    RequirementRule,
)

S = AdminState

_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    S.CONFIRMED.value: frozenset({S.PENDING_DOCS.value, S.CANCELLED.value}),
    S.PENDING_DOCS.value: frozenset({S.IN_PRODUCTION.value, S.CANCELLED.value}),
    S.IN_PRODUCTION.value: frozenset({S.DELIVERED.value, S.INCIDENT.value, S.CANCELLED.value}),
    S.DELIVERED.value: frozenset({S.INVOICED.value, S.INCIDENT.value}),
    S.INVOICED.value: frozenset({S.PAID.value}),
    S.PAID.value: frozenset(),
    S.CANCELLED.value: frozenset(),
    S.INCIDENT.value: frozenset({S.IN_PRODUCTION.value, S.DELIVERED.value, S.CANCELLED.value}),
}

_REQUIREMENTS: Dict[str, List[Requirement]] = {
    S.CONFIRMED.value: [
        Requirement(
            path="budget.total",
            message="Verified budget total (budget.total) is required",
            rule=RequirementRule.POSITIVE,
        ),
    ],
    S.PENDING_DOCS.value: [
        Requirement(path="required_documents", message="List of required documents is required"),
    ],
    S.IN_PRODUCTION.value: [
        Requirement(path="production_start_date", message="Production start date is required"),
        Requirement(path="workshop_owner", message="Workshop owner is required"),
    ],
    S.DELIVERED.value: [
        Requirement(path="actual_delivery_date", message="Actual delivery date is required"),
        Requirement(path="customer_acceptance", message="Customer acceptance is required"),
    ],
    S.INVOICED.value: [
        Requirement(path="invoice_number", message="Invoice number is required"),
        Requirement(path="invoice_date", message="Invoice date is required"),
    ],
    S.PAID.value: [
        Requirement(path="payment_date", message="Payment date is required"),
        Requirement(path="payment_method", message="Payment method is required"),
    ],
    S.CANCELLED.value: [
        Requirement(path="cancellation_reason", message="Cancellation reason is required"),
    ],
    S.INCIDENT.value: [
        Requirement(path="incident_type", message="Incident type is required"),
        Requirement(path="incident_description", message="Incident description is required"),
    ],
}

_FORMS: Dict[str, FormSchema] = {
    S.CONFIRMED.value: FormSchema(
        title="Verify confirmation",
        fields=[
            FieldDescriptor(name="budget.total", kind=FieldKind.NUMBER, label="Verified budget", required=True),
            FieldDescriptor(name="customer.address", kind=FieldKind.TEXTAREA, label="Delivery address", required=True),
        ],
    ),
    S.PENDING_DOCS.value: FormSchema(
        title="Manage documentation",
        fields=[
            FieldDescriptor(
                name="required_documents", kind=FieldKind.ARRAY, label="Required documents", required=True
            ),
            FieldDescriptor(name="documents_deadline", kind=FieldKind.DATE, label="Documentation deadline"),
        ],
    ),
    S.IN_PRODUCTION.value: FormSchema(
        title="Send to production",
        fields=[
            FieldDescriptor(
                name="production_start_date", kind=FieldKind.DATE, label="Production start date", required=True
            ),
            FieldDescriptor(name="workshop_owner", kind=FieldKind.TEXT, label="Workshop owner", required=True),
            FieldDescriptor(name="estimated_delivery_date", kind=FieldKind.DATE, label="Estimated delivery date"),
        ],
    ),
    S.DELIVERED.value: FormSchema(
        title="Record delivery",
        fields=[
            FieldDescriptor(
                name="actual_delivery_date", kind=FieldKind.DATE, label="Actual delivery date", required=True
            ),
            FieldDescriptor(
                name="customer_acceptance",
                kind=FieldKind.SELECT,
                label="Customer acceptance",
                required=True,
                options=["yes", "no", "partial"],
            ),
            FieldDescriptor(name="delivery_documents", kind=FieldKind.ARRAY, label="Delivery documents"),
        ],
    ),
    S.INVOICED.value: FormSchema(
        title="Create invoice",
        fields=[
            FieldDescriptor(name="invoice_number", kind=FieldKind.TEXT, label="Invoice number", required=True),
            FieldDescriptor(name="invoice_date", kind=FieldKind.DATE, label="Invoice date", required=True),
            FieldDescriptor(name="invoiced_amount", kind=FieldKind.NUMBER, label="Invoiced amount", required=True),
        ],
    ),
    S.PAID.value: FormSchema(
        title="Record payment",
        fields=[
            FieldDescriptor(name="payment_date", kind=FieldKind.DATE, label="Payment date", required=True),
            FieldDescriptor(
                name="payment_method",
                kind=FieldKind.SELECT,
                label="Payment method",
                required=True,
                options=["transfer", "cash", "cheque", "card"],
            ),
            FieldDescriptor(name="paid_amount", kind=FieldKind.NUMBER, label="Paid amount", required=True),
        ],
    ),
    S.CANCELLED.value: FormSchema(
        title="Cancel order",
        fields=[
            FieldDescriptor(
                name="cancellation_reason", kind=FieldKind.TEXTAREA, label="Cancellation reason", required=True
            ),
            FieldDescriptor(
                name="billing_affected", kind=FieldKind.SELECT, label="Billing affected", options=["yes", "no"]
            ),
        ],
    ),
    S.INCIDENT.value: FormSchema(
        title="Handle incident",
        fields=[
            FieldDescriptor(
                name="incident_type",
                kind=FieldKind.SELECT,
                label="Incident type",
                required=True,
                options=["quality", "delivery", "billing", "customer"],
            ),
            FieldDescriptor(
                name="incident_description", kind=FieldKind.TEXTAREA, label="Description", required=True
            ),
            FieldDescriptor(name="corrective_actions", kind=FieldKind.TEXTAREA, label="Corrective actions"),
        ],
    ),
}


class AdminStateMachine(DepartmentStateMachine):
    """Back office: documentation, production order, delivery, billing."""

    @property
    def department(self) -> Department:
        return Department.ADMIN

    @property
    def state_enum(self) -> Type[Enum]:
        return AdminState

    @property
    def transitions(self) -> Dict[str, FrozenSet[str]]:
        return _TRANSITIONS

    @property
    def entry_states(self) -> FrozenSet[str]:
        return frozenset({S.CONFIRMED.value})

    @property
    def requirements(self) -> Dict[str, List[Requirement]]:
        return _REQUIREMENTS

    @property
    def forms(self) -> Dict[str, FormSchema]:
        return _FORMS
