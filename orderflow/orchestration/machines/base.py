"""
Base Department State Machine - abstract interface for every department.

Each machine is a static policy object:
- Legal transitions (adjacency table)
- Mandatory data per target state
- Descriptive form fields per state, for rendering input schemas

Machines hold no reference to any order and keep no state between calls.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Type

from pydantic import BaseModel, Field

from orderflow.kernel.models.department import Department


class FieldKind(str, Enum):
    """Kinds of values a state may ask for."""
    TEXT = "text"
    EMAIL = "email"
    PHONE = "tel"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    ARRAY = "array"
    CHECKBOX = "checkbox"


class FieldDescriptor(BaseModel):
    """One input expected by a state."""

    name: str
    kind: FieldKind
    label: str
    required: bool = False
    options: List[str] = Field(default_factory=list)


class FormSchema(BaseModel):
    """Input shape of a state, as shown to external callers."""

    title: str
    fields: List[FieldDescriptor] = Field(default_factory=list)


class RequirementRule(str, Enum):
    """How a mandatory attribute is checked."""
    PRESENT = "present"    # not missing, empty or zero
    POSITIVE = "positive"  # a number greater than zero


class Requirement(BaseModel):
    """A mandatory attribute of a target state."""

    path: str
    message: str
    rule: RequirementRule = RequirementRule.PRESENT


class ValidationResult(BaseModel):
    """Outcome of checking data against a state's requirements."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
    required_data: List[str] = Field(default_factory=list)


def lookup(data: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path ("budget.total") in nested mappings."""
    current: Any = data
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
        if current is None:
            return None
    return current


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _is_positive(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


class DepartmentStateMachine(ABC):
    """
    Abstract base class for department lifecycles.

    Subclasses only declare tables; every operation here is pure.
    """

    @property
    @abstractmethod
    def department(self) -> Department:
        """Department this machine governs."""
        pass

    @property
    @abstractmethod
    def state_enum(self) -> Type[Enum]:
        """Enum of legal states."""
        pass

    @property
    @abstractmethod
    def transitions(self) -> Dict[str, FrozenSet[str]]:
        """Successor set per state."""
        pass

    @property
    @abstractmethod
    def entry_states(self) -> FrozenSet[str]:
        """States an unassigned department may enter."""
        pass

    @property
    @abstractmethod
    def requirements(self) -> Dict[str, List[Requirement]]:
        """Mandatory attributes per target state."""
        pass

    @property
    @abstractmethod
    def forms(self) -> Dict[str, FormSchema]:
        """Descriptive input schema per state."""
        pass

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(s.value for s in self.state_enum)

    @property
    def terminal_states(self) -> FrozenSet[str]:
        """Known states with no successor."""
        return frozenset(s for s in self.states if not self.available_transitions(s))

    def is_known_state(self, state: Optional[str]) -> bool:
        return state in self.states

    def is_terminal(self, state: Optional[str]) -> bool:
        return state in self.terminal_states

    def can_transition(self, from_state: Optional[str], to_state: str) -> bool:
        """Whether to_state is in from_state's successor set."""
        return to_state in self.available_transitions(from_state)

    def available_transitions(self, from_state: Optional[str]) -> FrozenSet[str]:
        """Successor set; empty for terminal, unknown or unassigned states."""
        if from_state is None:
            return frozenset()
        return self.transitions.get(from_state, frozenset())

    def validate(self, to_state: str, merged_data: Mapping[str, Any]) -> ValidationResult:
        """
        Check merged_data against the mandatory attributes of to_state.

        States without declared requirements are trivially valid.
        """
        errors: List[str] = []
        for requirement in self.requirements.get(to_state, []):
            value = lookup(merged_data, requirement.path)
            if requirement.rule == RequirementRule.POSITIVE:
                failed = not _is_positive(value)
            else:
                failed = _is_blank(value)
            if failed:
                errors.append(requirement.message)

        return ValidationResult(
            valid=not errors,
            errors=errors,
            required_data=[f.name for f in self.required_fields(to_state)],
        )

    def required_fields(self, state: Optional[str]) -> List[FieldDescriptor]:
        """Ordered field descriptors for state (empty if none)."""
        return list(self.form_for(state).fields)

    def form_for(self, state: Optional[str]) -> FormSchema:
        form = self.forms.get(state) if state is not None else None
        return form.model_copy(deep=True) if form else FormSchema(title="No form")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.department.value}>"
