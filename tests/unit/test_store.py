"""Unit tests for the in-memory artifact store."""

import pytest

from orderflow.kernel.models.artifact import Artifact
from orderflow.kernel.models.department import Department


def _order() -> Artifact:
    return Artifact.new(
        {"customer": {"name": "Acme", "email": "a@acme.com"}, "items": ["Widget"]},
        "comercial_1",
    )


class TestInMemoryArtifactStore:
    """Tests for InMemoryArtifactStore."""

    def test_put_and_get(self, store):
        order = _order()
        store.put(order)
        assert store.get(order.id) == order
        assert order.id in store
        assert len(store) == 1

    def test_missing(self, store):
        assert store.get("missing") is None
        assert "missing" not in store

    def test_reads_are_copies(self, store):
        """Mutating a read order does not touch the stored one."""
        order = _order()
        store.put(order)

        copy = store.get(order.id)
        copy.record_transition(Department.COMMERCIAL, "confirmed", "comercial_1")

        assert store.get(order.id).state_of(Department.COMMERCIAL) == "proposed"

    def test_writes_are_copies(self, store):
        order = _order()
        store.put(order)
        order.notes = "changed after put"
        assert store.get(order.id).notes == ""

    def test_append_history(self, store):
        order = _order()
        store.put(order)
        record = order.record_transition(Department.COMMERCIAL, "confirmed", "comercial_1")

        store.append_history(order.id, record)

        assert store.get(order.id).history[-1] == record

    def test_append_history_unknown_order(self, store):
        record = _order().history[0]
        with pytest.raises(KeyError):
            store.append_history("missing", record)

    def test_commit_transition(self, store):
        """State slot and history record are stored together, without duplicates."""
        order = _order()
        store.put(order)
        record = order.record_transition(Department.COMMERCIAL, "confirmed", "comercial_1")

        store.commit_transition(order, record)

        stored = store.get(order.id)
        assert stored.state_of(Department.COMMERCIAL) == "confirmed"
        assert len(stored.history) == 2

    def test_delete(self, store):
        order = _order()
        store.put(order)
        assert store.delete(order.id) is True
        assert store.delete(order.id) is False
        assert store.list() == []

    def test_list_keeps_insertion_order(self, store):
        first, second = _order(), _order()
        store.put(first)
        store.put(second)
        assert [a.id for a in store.list()] == [first.id, second.id]
