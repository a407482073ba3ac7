"""Unit tests for the department state machines."""

import pytest

from orderflow.exceptions import InvalidDepartmentError
from orderflow.kernel.models.department import Department
from orderflow.orchestration.machines import (
    MACHINES,
    AdminStateMachine,
    CommercialStateMachine,
    FieldKind,
    WorkshopStateMachine,
    get_machine,
)
from orderflow.orchestration.machines.base import lookup


class TestTransitionTables:
    """Tests for transition legality."""

    def test_terminal_states(self):
        """Terminal states are exactly the states without successors."""
        assert CommercialStateMachine().terminal_states == {"cancelled"}
        assert AdminStateMachine().terminal_states == {"paid", "cancelled"}
        assert WorkshopStateMachine().terminal_states == {"delivered", "cancelled"}

    @pytest.mark.parametrize("department", list(Department))
    def test_terminal_states_have_no_transitions(self, department):
        """No transition leaves a terminal state."""
        machine = MACHINES[department]
        for terminal in machine.terminal_states:
            assert machine.available_transitions(terminal) == frozenset()
            for target in machine.states:
                assert not machine.can_transition(terminal, target)

    def test_commercial_edges(self):
        machine = CommercialStateMachine()
        assert machine.can_transition("proposed", "confirmed")
        assert machine.can_transition("onHold", "confirmed")
        assert not machine.can_transition("proposed", "revised")

    def test_admin_edges(self):
        machine = AdminStateMachine()
        assert machine.available_transitions("inProduction") == {"delivered", "incident", "cancelled"}
        assert machine.can_transition("incident", "delivered")
        assert not machine.can_transition("invoiced", "cancelled")

    def test_workshop_cannot_skip_production(self):
        """pendingDocs only leads to inProduction."""
        machine = WorkshopStateMachine()
        assert machine.available_transitions("pendingDocs") == {"inProduction"}
        assert not machine.can_transition("pendingDocs", "delivered")

    def test_unassigned_and_unknown_have_no_successors(self):
        """Unassigned is handled by the coordinator, not by the table."""
        machine = AdminStateMachine()
        assert machine.available_transitions(None) == frozenset()
        assert machine.available_transitions("nonsense") == frozenset()
        assert not machine.can_transition(None, "confirmed")

    def test_entry_states(self):
        assert MACHINES[Department.COMMERCIAL].entry_states == {"proposed"}
        assert MACHINES[Department.ADMIN].entry_states == {"confirmed"}
        assert MACHINES[Department.WORKSHOP].entry_states == {"pendingDocs"}

    def test_same_named_states_are_independent(self):
        """admin and workshop both have inProduction, each in its own enum."""
        admin, workshop = AdminStateMachine(), WorkshopStateMachine()
        assert "inProduction" in admin.states and "inProduction" in workshop.states
        assert admin.state_enum is not workshop.state_enum


class TestValidation:
    """Tests for per-state mandatory data."""

    def test_proposal_requires_customer_and_items(self):
        result = CommercialStateMachine().validate("proposed", {"customer": {"name": "Acme"}})
        assert not result.valid
        assert len(result.errors) == 2
        assert any("email" in error for error in result.errors)

    def test_confirmation_requires_positive_total(self):
        """A zero budget total is treated as missing."""
        machine = CommercialStateMachine()
        result = machine.validate(
            "confirmed", {"budget": {"total": 0}, "requested_delivery_date": "2026-12-01"}
        )
        assert not result.valid
        assert "budget.total" in result.errors[0]

    def test_confirmation_rejects_non_numeric_total(self):
        result = CommercialStateMachine().validate(
            "confirmed", {"budget": {"total": "abc"}, "requested_delivery_date": "2026-12-01"}
        )
        assert not result.valid

    def test_confirmation_valid(self):
        result = CommercialStateMachine().validate(
            "confirmed", {"budget": {"total": 1210.0}, "requested_delivery_date": "2026-12-01"}
        )
        assert result.valid
        assert result.errors == []
        assert "budget.total" in result.required_data

    def test_empty_values_are_missing(self):
        """Blank strings, empty lists and zero count as absent."""
        machine = AdminStateMachine()
        assert not machine.validate("pendingDocs", {"required_documents": []}).valid
        assert not machine.validate("cancelled", {"cancellation_reason": "  "}).valid
        assert machine.validate("pendingDocs", {"required_documents": ["contract"]}).valid

    def test_state_without_requirements_is_valid(self):
        assert WorkshopStateMachine().validate("pendingDocs", {}).valid

    def test_validate_is_idempotent(self):
        """Same input, same verdict; the input is not modified."""
        machine = AdminStateMachine()
        data = {"incident_type": "quality"}
        first = machine.validate("incident", data)
        second = machine.validate("incident", data)
        assert first == second
        assert data == {"incident_type": "quality"}

    def test_lookup_dotted_path(self):
        assert lookup({"budget": {"total": 5}}, "budget.total") == 5
        assert lookup({"budget": None}, "budget.total") is None
        assert lookup({}, "customer.name") is None


class TestForms:
    """Tests for descriptive form fields."""

    def test_required_fields_in_order(self):
        fields = WorkshopStateMachine().required_fields("delivered")
        assert [f.name for f in fields][:2] == ["quality_check", "completion_date"]
        assert fields[0].kind == FieldKind.SELECT
        assert fields[0].options == ["approved", "rejected", "conditional"]

    def test_optional_fields_are_described(self):
        form = AdminStateMachine().form_for("cancelled")
        by_name = {f.name: f for f in form.fields}
        assert by_name["cancellation_reason"].required
        assert not by_name["billing_affected"].required

    def test_delivery_form_asks_for_customer_acceptance(self):
        """Workshop collects what admin's delivered state needs, without requiring it."""
        workshop = {f.name: f for f in WorkshopStateMachine().form_for("delivered").fields}
        admin = {f.name: f for f in AdminStateMachine().form_for("delivered").fields}

        assert not workshop["customer_acceptance"].required
        assert workshop["customer_acceptance"].options == admin["customer_acceptance"].options
        assert WorkshopStateMachine().validate(
            "delivered", {"quality_check": "approved", "completion_date": "2026-11-20"}
        ).valid

    def test_unknown_state_has_no_form(self):
        form = CommercialStateMachine().form_for(None)
        assert form.title == "No form"
        assert form.fields == []

    def test_form_is_a_copy(self):
        machine = CommercialStateMachine()
        machine.form_for("proposed").fields.clear()
        assert machine.form_for("proposed").fields


class TestRegistry:
    """Tests for the machine registry."""

    def test_get_machine_by_key(self):
        assert isinstance(get_machine("commercial"), CommercialStateMachine)
        assert get_machine(Department.WORKSHOP) is MACHINES[Department.WORKSHOP]

    def test_administrative_alias(self):
        assert isinstance(get_machine("administrative"), AdminStateMachine)

    def test_unknown_department(self):
        with pytest.raises(InvalidDepartmentError):
            get_machine("finance")
