"""Unit tests for the synchronous event bus."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from orderflow.kernel.events.event_bus import EventBus
from orderflow.kernel.events.event_types import StateChangedEvent
from orderflow.kernel.models.department import Department
from orderflow.kernel.models.event_log import EventType, specific_event_for


class TestPublish:
    """Tests for publish/subscribe."""

    def test_handlers_run_in_registration_order(self, bus):
        calls = []
        bus.subscribe(EventType.ORDER_CONFIRMED, lambda e: calls.append("first") or 1)
        bus.subscribe(EventType.ORDER_CONFIRMED, lambda e: calls.append("second") or 2)

        results = bus.publish(EventType.ORDER_CONFIRMED, {"artifact_id": "o1"})

        assert calls == ["first", "second"]
        assert results == [1, 2]

    def test_failing_handler_is_isolated(self, bus):
        """A raising handler yields an error entry; later handlers still run."""
        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe("custom.event", broken)
        bus.subscribe("custom.event", lambda e: "ok")

        results = bus.publish("custom.event", {})

        assert results == [{"error": "boom"}, "ok"]

    def test_no_handlers(self, bus):
        assert bus.publish(EventType.STATE_CHANGED, {"artifact_id": "o1"}) == []
        assert len(bus.history()) == 1

    def test_string_and_enum_keys_match(self, bus):
        bus.subscribe("commercial.order.confirmed", lambda e: e.type)
        assert bus.publish(EventType.ORDER_CONFIRMED) == ["commercial.order.confirmed"]
        assert bus.handler_count(EventType.ORDER_CONFIRMED) == 1

    def test_handler_receives_record(self, bus):
        received = []
        bus.subscribe(EventType.STATE_CHANGED, received.append)
        bus.publish(
            EventType.STATE_CHANGED,
            StateChangedEvent(artifact_id="o1", department="admin", to_state="confirmed"),
        )
        record = received[0]
        assert record.id.startswith("evt_")
        assert record.payload["to_state"] == "confirmed"
        assert record.payload["from_state"] is None


class TestEventLog:
    """Tests for the append-only event log."""

    def test_history_filter(self, bus):
        bus.publish(EventType.ORDER_PROPOSED, {"artifact_id": "o1"})
        bus.publish(EventType.STATE_CHANGED, {"artifact_id": "o1"})
        bus.publish(EventType.ORDER_PROPOSED, {"artifact_id": "o2"})

        proposed = bus.history(EventType.ORDER_PROPOSED)
        assert [e.payload["artifact_id"] for e in proposed] == ["o1", "o2"]
        assert len(bus.history()) == 3

    def test_history_is_a_copy(self, bus):
        bus.publish(EventType.ORDER_PROPOSED, {})
        assert isinstance(bus.history(), tuple)

    def test_records_are_immutable(self, bus):
        bus.publish(EventType.ORDER_PROPOSED, {})
        with pytest.raises(PydanticValidationError):
            bus.history()[0].type = "tampered"

    def test_payload_made_json_compatible(self, bus):
        bus.publish("custom.event", {"day": date(2026, 12, 1), "department": Department.ADMIN})
        payload = bus.history()[0].payload
        assert payload == {"day": "2026-12-01", "department": "admin"}


class TestRecursionGuard:
    """Tests for the bounded re-entrancy of publish."""

    def test_depth_limit(self):
        """A handler that republishes its own event stops at max_depth."""
        bus = EventBus(max_depth=3)
        bus.subscribe("loop", lambda e: bus.publish("loop", {}))

        results = bus.publish("loop", {})

        # Depth 0..3 are logged; the fourth nested publish skips dispatch
        assert len(bus.history("loop")) == 4
        assert bus.depth == 0
        innermost = results[0][0][0]
        assert "depth limit" in innermost[0]["error"]

    def test_reentrant_publish_within_limit(self, bus):
        bus.subscribe("outer", lambda e: bus.publish("inner", {}))
        bus.subscribe("inner", lambda e: "inner done")

        assert bus.publish("outer", {}) == [["inner done"]]
        assert [e.type for e in bus.history()] == ["outer", "inner"]


class TestEventCatalogue:
    """Tests for the department + state event table."""

    def test_specific_events(self):
        assert specific_event_for(Department.COMMERCIAL, "confirmed") == EventType.ORDER_CONFIRMED
        assert specific_event_for(Department.ADMIN, "inProduction") == EventType.PRODUCTION_ORDER_SENT
        assert specific_event_for(Department.WORKSHOP, "delivered") == EventType.PRODUCTION_FINISHED

    @pytest.mark.parametrize(
        "department,state",
        [
            (Department.COMMERCIAL, "onHold"),
            (Department.ADMIN, "confirmed"),
            (Department.ADMIN, "cancelled"),
            (Department.WORKSHOP, "pendingDocs"),
            (Department.WORKSHOP, "cancelled"),
        ],
    )
    def test_unrecognized_pairs(self, department, state):
        assert specific_event_for(department, state) is None

    def test_identifiers(self):
        assert EventType.PRODUCTION_ORDER_SENT.value == "admin.production_order.sent"
        assert EventType.NOTIFICATION_REQUIRED.value == "system.notification.required"
