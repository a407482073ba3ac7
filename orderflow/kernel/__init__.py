"""
Stable Kernel Layer

Foundational components of the workflow engine:
- Order artifact (shared attributes + one state slot per department)
- Immutable event log and the synchronous event bus
- Artifact stores (in-memory default, relational substitute)

Architectural invariants:
- Exactly one order per id; ids are never reused
- History is append-only, one record per accepted transition
- Rejected operations leave the order and the event log untouched
"""

from orderflow.kernel.models import (
    AdminState,
    Artifact,
    Budget,
    CommercialState,
    Customer,
    Department,
    DepartmentState,
    EventRecord,
    EventType,
    HistoryRecord,
    Priority,
    WorkshopState,
)

__all__ = [
    # Departments
    "Department",
    "CommercialState",
    "AdminState",
    "WorkshopState",
    "Priority",
    # Artifact
    "Artifact",
    "Budget",
    "Customer",
    "DepartmentState",
    "HistoryRecord",
    # Event Log
    "EventRecord",
    "EventType",
]
