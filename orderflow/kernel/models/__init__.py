"""
Kernel Data Models

The order artifact (pydantic), department enums, event log entries and the
SQLAlchemy tables used by the relational artifact store.
"""

from orderflow.kernel.models.base import Base, TimestampMixin, generate_id, utcnow
from orderflow.kernel.models.department import (
    AdminState,
    CommercialState,
    Department,
    Priority,
    WorkshopState,
)
from orderflow.kernel.models.artifact import (
    Artifact,
    Budget,
    Customer,
    DepartmentState,
    HistoryRecord,
    OrderDetails,
    SHARED_FIELDS,
    SYSTEM_SOURCE,
    split_shared,
)
from orderflow.kernel.models.event_log import EventRecord, EventType, SPECIFIC_EVENTS, specific_event_for
from orderflow.kernel.models.order_record import OrderHistoryRecord, OrderRecord

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_id",
    "utcnow",
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
    "OrderDetails",
    "SHARED_FIELDS",
    "SYSTEM_SOURCE",
    "split_shared",
    # Event Log
    "EventRecord",
    "EventType",
    "SPECIFIC_EVENTS",
    "specific_event_for",
    # Persistence
    "OrderRecord",
    "OrderHistoryRecord",
]
