"""Unit tests for the order artifact model."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from orderflow.kernel.models.artifact import Artifact, Budget, DepartmentState, split_shared
from orderflow.kernel.models.department import Department, Priority


def _order() -> Artifact:
    return Artifact.new(
        {"customer": {"name": "Acme", "email": "a@acme.com"}, "items": ["Widget"]},
        "comercial_1",
    )


class TestArtifactCreation:
    """Tests for Artifact.new."""

    def test_commercial_starts_proposed(self):
        order = _order()
        assert order.state_of(Department.COMMERCIAL) == "proposed"
        assert order.department_states[Department.COMMERCIAL].owner == "comercial_1"
        assert order.state_of(Department.ADMIN) is None
        assert order.state_of(Department.WORKSHOP) is None

    def test_seed_history_entry(self):
        order = _order()
        assert len(order.history) == 1
        seed = order.history[0]
        assert seed.from_state is None
        assert seed.to_state == "proposed"
        assert seed.department == "commercial"

    def test_all_departments_present(self):
        """Every department key exists even when built from a partial mapping."""
        order = Artifact(department_states={Department.ADMIN: DepartmentState(state="confirmed")})
        assert set(order.department_states) == set(Department)
        assert not order.department_states[Department.WORKSHOP].is_assigned

    def test_ids_are_unique(self):
        assert _order().id != _order().id

    def test_budget_defaults(self):
        budget = Budget()
        assert budget.tax_rate == 21.0
        assert budget.total == 0.0

    def test_defaults(self):
        order = _order()
        assert order.priority == Priority.NORMAL
        assert order.requested_delivery_date is None


class TestSharedAttributes:
    """Tests for shared attribute updates."""

    def test_split_shared(self):
        shared, rest = split_shared({"budget": {"total": 1}, "hold_reason": "waiting"})
        assert shared == {"budget": {"total": 1}}
        assert rest == {"hold_reason": "waiting"}

    def test_customer_is_merged_key_by_key(self):
        order = _order()
        order.apply_shared_updates({"customer": {"phone": "555-0100"}})
        assert order.customer.name == "Acme"
        assert order.customer.phone == "555-0100"

    def test_values_are_coerced(self):
        order = _order()
        order.apply_shared_updates({"requested_delivery_date": "2026-12-01", "priority": "urgent"})
        assert order.requested_delivery_date == date(2026, 12, 1)
        assert order.priority == Priority.URGENT

    def test_preview_does_not_mutate(self):
        order = _order()
        preview = order.preview_shared({"budget": {"total": 500}})
        assert preview.budget.total == 500
        assert order.budget.total == 0.0

    def test_invalid_values_rejected(self):
        order = _order()
        with pytest.raises(PydanticValidationError):
            order.preview_shared({"priority": "whenever"})


class TestTransitions:
    """Tests for record_transition."""

    def test_data_is_merged(self):
        order = _order()
        order.record_transition(Department.ADMIN, "confirmed", "system", data={"a": 1})
        order.record_transition(Department.ADMIN, "pendingDocs", "admin_1", data={"b": 2})
        slot = order.department_states[Department.ADMIN]
        assert slot.data == {"a": 1, "b": 2}
        assert slot.state == "pendingDocs"
        assert slot.owner == "admin_1"

    def test_history_appended(self):
        order = _order()
        record = order.record_transition(Department.COMMERCIAL, "confirmed", "comercial_1", note="ok")
        assert order.history[-1] == record
        assert record.from_state == "proposed"
        assert order.updated_at == record.timestamp

    def test_history_records_are_frozen(self):
        order = _order()
        with pytest.raises(PydanticValidationError):
            order.history[0].note = "rewritten"

    def test_system_entry(self):
        order = _order()
        record = order.record_system_entry("partial_update", "comercial_1", "Partial update: priority")
        assert record.department == "system"
        assert len(order.history) == 2


class TestSerialization:
    """Tests for JSON round trip."""

    def test_round_trip(self):
        """Serializing and rebuilding keeps slots, history order and budget figures."""
        order = _order()
        order.apply_shared_updates({"budget": {"amount": 1000.0, "discount": 5.0, "total": 1149.5}})
        order.record_transition(Department.COMMERCIAL, "confirmed", "comercial_1")
        order.record_transition(Department.ADMIN, "confirmed", "system", data={"checked": True})

        raw = order.to_json()
        rebuilt = Artifact.from_json(raw)

        assert rebuilt == order
        assert rebuilt.to_json() == raw
        assert [h.to_state for h in rebuilt.history] == ["proposed", "confirmed", "confirmed"]
        assert rebuilt.budget.total == 1149.5

    def test_snapshot_uses_department_keys(self):
        snapshot = _order().snapshot()
        assert set(snapshot["department_states"]) == {"commercial", "admin", "workshop"}
