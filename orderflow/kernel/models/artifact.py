"""
Artifact model - the customer order shared by every department.

The order carries the shared descriptive attributes once, plus one state slot
per department. Departments never hold a second copy of shared attributes:
transition data naming one of them is written onto the order itself.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from orderflow.config import get_settings
from orderflow.kernel.models.base import generate_id, utcnow
from orderflow.kernel.models.department import CommercialState, Department, Priority

SYSTEM_SOURCE = "system"

# Attributes owned by the order rather than by any department
SHARED_FIELDS: Tuple[str, ...] = (
    "customer",
    "items",
    "specification",
    "requested_delivery_date",
    "priority",
    "notes",
    "budget",
    "documents",
)

# Shared attributes that are sub-documents and get merged key by key
_MERGED_FIELDS = frozenset(("customer", "budget"))


def _default_tax_rate() -> float:
    return get_settings().default_tax_rate


class Customer(BaseModel):
    """Customer contact data."""

    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    address: str = ""


class Budget(BaseModel):
    """Monetary summary as entered by the departments; never recomputed here."""

    amount: float = 0.0
    tax_rate: float = Field(default_factory=_default_tax_rate)
    discount: float = 0.0
    total: float = 0.0


class DepartmentState(BaseModel):
    """Lifecycle slot of one department on one order."""

    state: Optional[str] = None
    changed_at: Optional[datetime] = None
    owner: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_assigned(self) -> bool:
        return self.state is not None


class HistoryRecord(BaseModel):
    """One accepted transition (or system edit) of an order."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    department: str
    from_state: Optional[str] = None
    to_state: str
    owner: Optional[str] = None
    note: str = ""


class OrderDetails(BaseModel):
    """Shared descriptive attributes of an order."""

    customer: Customer = Field(default_factory=Customer)
    items: List[Any] = Field(default_factory=list)
    specification: str = ""
    requested_delivery_date: Optional[date] = None
    priority: Priority = Priority.NORMAL
    notes: str = ""
    budget: Budget = Field(default_factory=Budget)
    documents: List[Any] = Field(default_factory=list)


def split_shared(data: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a data bag into (shared attribute updates, department data)."""
    shared: Dict[str, Any] = {}
    rest: Dict[str, Any] = {}
    for key, value in (data or {}).items():
        if key in SHARED_FIELDS:
            shared[key] = value
        else:
            rest[key] = value
    return shared, rest


def _blank_states() -> Dict[Department, DepartmentState]:
    return {department: DepartmentState() for department in Department}


class Artifact(OrderDetails):
    """
    The customer order.

    Mutated only through record_transition / apply_shared_updates, both of
    which are driven by the workflow coordinator.
    """

    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    department_states: Dict[Department, DepartmentState] = Field(default_factory=_blank_states)
    history: List[HistoryRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _ensure_all_departments(self) -> "Artifact":
        for department in Department:
            self.department_states.setdefault(department, DepartmentState())
        return self

    @classmethod
    def new(cls, initial_data: Dict[str, Any], commercial_owner: Optional[str]) -> "Artifact":
        """Build a freshly proposed order with its seed history entry."""
        shared, _ = split_shared(initial_data)
        now = utcnow()
        artifact = cls(created_at=now, updated_at=now, **shared)
        artifact.department_states[Department.COMMERCIAL] = DepartmentState(
            state=CommercialState.PROPOSED.value,
            changed_at=now,
            owner=commercial_owner,
        )
        artifact.history.append(
            HistoryRecord(
                timestamp=now,
                department=Department.COMMERCIAL.value,
                from_state=None,
                to_state=CommercialState.PROPOSED.value,
                owner=commercial_owner,
                note="Order created",
            )
        )
        return artifact

    def state_of(self, department: Department) -> Optional[str]:
        return self.department_states[department].state

    def is_in(self, department: Department, state: str) -> bool:
        return self.department_states[department].state == state

    def preview_shared(self, changes: Dict[str, Any]) -> OrderDetails:
        """Validate shared attribute changes without applying them."""
        current = self.model_dump(include=set(SHARED_FIELDS))
        for key, value in changes.items():
            if key in _MERGED_FIELDS and isinstance(value, dict):
                current[key] = {**current[key], **value}
            else:
                current[key] = value
        return OrderDetails.model_validate(current)

    def apply_shared_updates(self, changes: Dict[str, Any], at: Optional[datetime] = None) -> None:
        if not changes:
            return
        preview = self.preview_shared(changes)
        for key in changes:
            setattr(self, key, getattr(preview, key))
        self.updated_at = at or utcnow()

    def shared_fields(self) -> Dict[str, Any]:
        """Shared attributes as plain data, used as validation context."""
        return self.model_dump(include=set(SHARED_FIELDS))

    def record_transition(
        self,
        department: Department,
        to_state: str,
        owner: Optional[str],
        note: str = "",
        data: Optional[Dict[str, Any]] = None,
        at: Optional[datetime] = None,
    ) -> HistoryRecord:
        """Move a department to to_state, merging data and appending history."""
        now = at or utcnow()
        slot = self.department_states[department]
        from_state = slot.state
        self.department_states[department] = DepartmentState(
            state=to_state,
            changed_at=now,
            owner=owner,
            data={**slot.data, **(data or {})},
        )
        record = HistoryRecord(
            timestamp=now,
            department=department.value,
            from_state=from_state,
            to_state=to_state,
            owner=owner,
            note=note,
        )
        self.history.append(record)
        self.updated_at = now
        return record

    def record_system_entry(self, to_state: str, owner: Optional[str], note: str = "") -> HistoryRecord:
        """Append a history entry that does not belong to any department."""
        record = HistoryRecord(
            timestamp=utcnow(),
            department=SYSTEM_SOURCE,
            to_state=to_state,
            owner=owner,
            note=note,
        )
        self.history.append(record)
        self.updated_at = record.timestamp
        return record

    def departments_active(self, candidates: Iterable[Department]) -> List[Department]:
        return [d for d in candidates if self.department_states[d].is_assigned]

    def snapshot(self) -> Dict[str, Any]:
        """JSON-compatible dict of the full order."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> "Artifact":
        return cls.model_validate_json(raw)
