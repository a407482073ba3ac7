"""
Workflow coordinator for customer orders.

The only component allowed to mutate an order. Every operation checks
everything first and only then commits through the artifact store and
publishes events, so a rejected call leaves the order and the event log
untouched.
"""

from collections import Counter
from typing import Any, Dict, List, Optional, Tuple, Union

import pydantic
from pydantic import BaseModel, Field
from pydantic_core import PydanticSerializationError, to_jsonable_python

from orderflow.exceptions import NotFoundError, TransitionError, ValidationError
from orderflow.kernel.events.event_bus import EventBus
from orderflow.kernel.events.event_types import (
    ArtifactProposedEvent,
    DepartmentTransitionEvent,
    OrderModifiedEvent,
    StateChangedEvent,
)
from orderflow.kernel.models.artifact import Artifact, DepartmentState, SHARED_FIELDS, split_shared
from orderflow.kernel.models.base import utcnow
from orderflow.kernel.models.department import AdminState, CommercialState, Department
from orderflow.kernel.models.event_log import EventType, specific_event_for
from orderflow.kernel.store.repository import ArtifactStore, InMemoryArtifactStore
from orderflow.logging_config import bind_log_context, get_logger
from orderflow.orchestration.machines import MACHINES, FormSchema, ValidationResult, get_machine

logger = get_logger(__name__)

DepartmentKey = Union[Department, str]

PARTIAL_UPDATE_STATE = "partial_update"

# A department that has not started may start once its upstream reaches this state
_UPSTREAM: Dict[Department, Tuple[Department, str]] = {
    Department.ADMIN: (Department.COMMERCIAL, CommercialState.CONFIRMED.value),
    Department.WORKSHOP: (Department.ADMIN, AdminState.IN_PRODUCTION.value),
}

# Departments concerned by an edit of a shared attribute
MODIFICATION_IMPACT: Dict[str, Tuple[Department, ...]] = {
    "specifications": (Department.WORKSHOP,),
    "requested_delivery_date": (Department.ADMIN, Department.WORKSHOP),
    "budget": (Department.ADMIN,),
    "customer": (Department.ADMIN,),
    "items": (Department.WORKSHOP, Department.ADMIN),
    "priority": (Department.ADMIN, Department.WORKSHOP),
}


class DepartmentView(BaseModel):
    """An order as seen by one department."""

    artifact: Artifact
    department: Department
    current: DepartmentState
    can_act: bool
    available_transitions: List[str] = Field(default_factory=list)
    form: FormSchema
    validation: ValidationResult


def _as_validation_error(state: str, exc: pydantic.ValidationError, department: Optional[str] = None) -> ValidationError:
    errors = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return ValidationError(state, errors, department=department)


def _require_json(state: str, data: Dict[str, Any], department: Optional[str] = None) -> Dict[str, Any]:
    """JSON-compatible copy of data; data that events cannot carry is rejected up front."""
    try:
        return to_jsonable_python(data)
    except PydanticSerializationError as exc:
        raise ValidationError(state, [f"data: {exc}"], department=department) from None


class WorkflowCoordinator:
    """
    Applies department transitions to orders and enforces eligibility.

    Usage:
        coordinator = WorkflowCoordinator()
        register_reaction_rules(coordinator.bus, coordinator)
        order = coordinator.create_artifact({"customer": {...}, "items": [...]}, "sales_1")
        order = coordinator.apply_transition(order.id, "commercial", "confirmed", "sales_1", extra_data={...})
    """

    def __init__(self, store: Optional[ArtifactStore] = None, bus: Optional[EventBus] = None):
        self.store = store if store is not None else InMemoryArtifactStore()
        self.bus = bus if bus is not None else EventBus()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_artifact(self, initial_data: Dict[str, Any], commercial_owner: Optional[str]) -> Artifact:
        """
        Create an order in the commercial entry state.

        Raises:
            ValidationError: initial_data lacks what a proposal requires
        """
        entry_state = CommercialState.PROPOSED.value
        machine = MACHINES[Department.COMMERCIAL]
        initial_data = dict(initial_data or {})
        shared, rest = split_shared(initial_data)

        try:
            artifact = Artifact.new(shared, commercial_owner)
        except pydantic.ValidationError as exc:
            raise _as_validation_error(entry_state, exc, Department.COMMERCIAL.value) from None

        result = machine.validate(entry_state, {**artifact.shared_fields(), **rest})
        if not result.valid:
            logger.info(
                "Order creation rejected",
                extra={"department": Department.COMMERCIAL.value, "errors": result.errors},
            )
            raise ValidationError(entry_state, result.errors, department=Department.COMMERCIAL.value)

        _require_json(entry_state, initial_data, Department.COMMERCIAL.value)
        artifact.department_states[Department.COMMERCIAL].data = rest
        with bind_log_context(artifact_id=artifact.id, department=Department.COMMERCIAL.value):
            self.store.put(artifact)
            logger.info("Order created", extra={"owner": commercial_owner})

            self.bus.publish(
                EventType.ORDER_PROPOSED,
                ArtifactProposedEvent(
                    artifact_id=artifact.id,
                    owner=commercial_owner,
                    artifact=artifact.snapshot(),
                ),
            )
        return self.get_artifact(artifact.id)

    def apply_transition(
        self,
        artifact_id: str,
        department: DepartmentKey,
        to_state: str,
        owner: Optional[str],
        note: str = "",
        extra_data: Optional[Dict[str, Any]] = None,
    ) -> Artifact:
        """
        Move one department of an order to to_state.

        Shared attributes named in extra_data (customer, budget, ...) are
        written onto the order; the rest is merged into the department's data.

        Returns:
            The order re-read after every reaction to this transition ran

        Raises:
            NotFoundError: unknown order
            InvalidDepartmentError: unknown department key
            TransitionError: unknown target state or illegal move
            ValidationError: mandatory data for to_state is missing
        """
        dept = Department.parse(department)
        machine = get_machine(dept)
        artifact = self.get_artifact(artifact_id)
        from_state = artifact.state_of(dept)
        extra_data = dict(extra_data or {})

        try:
            self._check_transition(machine, from_state, to_state)
        except TransitionError as exc:
            logger.info(
                "Transition rejected",
                extra={"artifact_id": artifact_id, "department": dept.value, "reason": str(exc)},
            )
            raise

        shared, rest = split_shared(extra_data)
        try:
            preview = artifact.preview_shared(shared)
        except pydantic.ValidationError as exc:
            raise _as_validation_error(to_state, exc, dept.value) from None

        context = {
            **preview.model_dump(),
            **artifact.department_states[dept].data,
            **rest,
        }
        result = machine.validate(to_state, context)
        if not result.valid:
            logger.info(
                "Transition rejected",
                extra={
                    "artifact_id": artifact_id,
                    "department": dept.value,
                    "from_state": from_state,
                    "to_state": to_state,
                    "errors": result.errors,
                },
            )
            raise ValidationError(to_state, result.errors, department=dept.value)

        event_data = _require_json(to_state, extra_data, dept.value)

        now = utcnow()
        artifact.apply_shared_updates(shared, at=now)
        record = artifact.record_transition(dept, to_state, owner, note=note, data=rest, at=now)
        with bind_log_context(artifact_id=artifact_id, department=dept.value):
            self.store.commit_transition(artifact, record)
            logger.info(
                "Transition applied",
                extra={"from_state": from_state, "to_state": to_state, "owner": owner},
            )

            self.bus.publish(
                EventType.STATE_CHANGED,
                StateChangedEvent(
                    artifact_id=artifact_id,
                    department=dept.value,
                    from_state=from_state,
                    to_state=to_state,
                    owner=owner,
                    note=note,
                ),
            )
            specific = specific_event_for(dept, to_state)
            if specific is not None:
                self.bus.publish(
                    specific,
                    DepartmentTransitionEvent(
                        artifact_id=artifact_id,
                        department=dept.value,
                        state=to_state,
                        owner=owner,
                        data=event_data,
                    ),
                )
        return self.get_artifact(artifact_id)

    def apply_partial_update(
        self,
        artifact_id: str,
        modification_type: str,
        changes: Dict[str, Any],
        owner: Optional[str],
    ) -> Tuple[Artifact, List[Department]]:
        """
        Edit shared attributes of an order without a state transition.

        Only departments already working the order are reported as affected.

        Raises:
            NotFoundError: unknown order
            ValidationError: a change targets a non-shared attribute or is malformed
        """
        artifact = self.get_artifact(artifact_id)
        changes = dict(changes or {})

        unknown = sorted(key for key in changes if key not in SHARED_FIELDS)
        if unknown:
            raise ValidationError(
                PARTIAL_UPDATE_STATE,
                [f"{key}: not an order attribute" for key in unknown],
            )
        try:
            artifact.preview_shared(changes)
        except pydantic.ValidationError as exc:
            raise _as_validation_error(PARTIAL_UPDATE_STATE, exc) from None

        event_changes = _require_json(PARTIAL_UPDATE_STATE, changes)

        affected = artifact.departments_active(MODIFICATION_IMPACT.get(modification_type, ()))
        artifact.apply_shared_updates(changes)
        artifact.record_system_entry(
            PARTIAL_UPDATE_STATE,
            owner,
            note=f"Partial update: {modification_type}",
        )
        with bind_log_context(artifact_id=artifact_id, department=Department.COMMERCIAL.value):
            self.store.put(artifact)
            logger.info(
                "Order modified",
                extra={
                    "modification_type": modification_type,
                    "affected_departments": [d.value for d in affected],
                },
            )

            self.bus.publish(
                EventType.ORDER_REVISED,
                OrderModifiedEvent(
                    artifact_id=artifact_id,
                    modification_type=modification_type,
                    origin_department=Department.COMMERCIAL.value,
                    affected_departments=[d.value for d in affected],
                    changes=event_changes,
                ),
            )
        return self.get_artifact(artifact_id), affected

    def delete_artifact(self, artifact_id: str) -> None:
        """Hard delete, meant for data-reset tooling only."""
        if not self.store.delete(artifact_id):
            raise NotFoundError(artifact_id)
        logger.warning("Order deleted", extra={"artifact_id": artifact_id})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_artifact(self, artifact_id: str) -> Artifact:
        artifact = self.store.get(artifact_id)
        if artifact is None:
            raise NotFoundError(artifact_id)
        return artifact

    def eligible_departments(self, artifact_id: str) -> Dict[Department, bool]:
        """Whether each department can currently act on the order."""
        return self._eligibility(self.get_artifact(artifact_id))

    def list_for_department(self, department: DepartmentKey, state: Optional[str] = None) -> List[DepartmentView]:
        """Orders the department has started working, optionally in one exact state."""
        dept = Department.parse(department)
        views = []
        for artifact in self.store.list():
            current = artifact.state_of(dept)
            if current is None or (state is not None and current != state):
                continue
            views.append(self._view(artifact, dept))
        return views

    def list_actionable(self, department: DepartmentKey, state: Optional[str] = None) -> List[DepartmentView]:
        """Orders the department can act on now, including ones it may start."""
        dept = Department.parse(department)
        views = []
        for artifact in self.store.list():
            if not self._eligibility(artifact)[dept]:
                continue
            if state is not None and artifact.state_of(dept) != state:
                continue
            views.append(self._view(artifact, dept))
        return views

    def department_view(self, artifact_id: str, department: DepartmentKey) -> DepartmentView:
        """Current slot, form, next moves and validation of one department."""
        dept = Department.parse(department)
        return self._view(self.get_artifact(artifact_id), dept)

    def state_counts(self) -> Dict[str, Any]:
        """Order counts per department and state."""
        artifacts = self.store.list()
        per_department: Dict[str, Dict[str, int]] = {}
        for dept in Department:
            counts = Counter(a.state_of(dept) or "unassigned" for a in artifacts)
            per_department[dept.value] = dict(sorted(counts.items()))

        completed = sum(1 for a in artifacts if self._is_completed(a))
        return {
            "total": len(artifacts),
            "by_department": per_department,
            "completed": completed,
            "in_progress": len(artifacts) - completed,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_transition(self, machine, from_state: Optional[str], to_state: str) -> None:
        department = machine.department.value
        if not machine.is_known_state(to_state):
            raise TransitionError(department, from_state, to_state, reason="unknown state")
        if from_state is None:
            if to_state not in machine.entry_states:
                raise TransitionError(department, from_state, to_state, reason="department has not started")
        elif not machine.can_transition(from_state, to_state):
            raise TransitionError(department, from_state, to_state)

    def _eligibility(self, artifact: Artifact) -> Dict[Department, bool]:
        result = {}
        for dept, machine in MACHINES.items():
            state = artifact.state_of(dept)
            if state is not None:
                result[dept] = not machine.is_terminal(state)
            elif dept in _UPSTREAM:
                upstream, required = _UPSTREAM[dept]
                result[dept] = artifact.is_in(upstream, required)
            else:
                result[dept] = True
        return result

    def _view(self, artifact: Artifact, dept: Department) -> DepartmentView:
        machine = MACHINES[dept]
        current = artifact.department_states[dept]
        if current.is_assigned:
            context = {**artifact.shared_fields(), **current.data}
            validation = machine.validate(current.state, context)
            form = machine.form_for(current.state)
        else:
            validation = ValidationResult(valid=False, errors=["Department not assigned"])
            form = FormSchema(title="No form")

        return DepartmentView(
            artifact=artifact,
            department=dept,
            current=current,
            can_act=self._eligibility(artifact)[dept],
            available_transitions=sorted(machine.available_transitions(current.state)),
            form=form,
            validation=validation,
        )

    @staticmethod
    def _is_completed(artifact: Artifact) -> bool:
        return artifact.is_in(Department.ADMIN, AdminState.PAID.value) or artifact.is_in(
            Department.COMMERCIAL, CommercialState.CANCELLED.value
        )
