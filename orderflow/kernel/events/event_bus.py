"""
Synchronous publish/subscribe bus with an append-only event log.

The bus is used for decoupled cross-department reactions only. Handlers run
on the publishing thread, in registration order, and may call back into the
workflow coordinator (which publishes again). Nesting is bounded by
max_depth so two rules that trigger each other cannot recurse forever.
"""

import uuid
from collections import defaultdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from orderflow.config import get_settings
from orderflow.kernel.models.event_log import EventRecord, EventType
from orderflow.logging_config import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[EventRecord], Any]
EventKey = Union[EventType, str]


def _key(event_type: EventKey) -> str:
    return event_type.value if isinstance(event_type, EventType) else str(event_type)


class EventBus:
    """
    Registry of handlers plus the immutable event log.

    Usage:
        bus = EventBus()
        bus.subscribe(EventType.ORDER_CONFIRMED, on_confirmed)
        results = bus.publish(EventType.ORDER_CONFIRMED, {"artifact_id": order.id})
    """

    def __init__(self, max_depth: Optional[int] = None):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._log: List[EventRecord] = []
        self._depth = 0
        self.max_depth = max_depth if max_depth is not None else get_settings().reaction_max_depth

    def subscribe(self, event_type: EventKey, handler: EventHandler) -> None:
        """Register a handler; several handlers per type run in registration order."""
        self._handlers[_key(event_type)].append(handler)

    def publish(self, event_type: EventKey, payload: Union[BaseModel, Dict[str, Any], None] = None) -> List[Any]:
        """
        Log an event, then run every handler for its type.

        A failing handler is isolated: its error is logged and reported as
        {"error": message} in the returned list, and the remaining handlers
        still run.

        Returns:
            One entry per handler, in registration order
        """
        key = _key(event_type)
        record = EventRecord(
            id=f"evt_{uuid.uuid4().hex}",
            type=key,
            payload=self._serialize_payload(payload),
        )
        self._log.append(record)

        if self._depth >= self.max_depth:
            logger.warning(
                "Reaction depth limit reached, handlers skipped",
                extra={"event_type": key, "max_depth": self.max_depth},
            )
            return [{"error": f"reaction depth limit {self.max_depth} reached for {key}"}]

        results: List[Any] = []
        self._depth += 1
        try:
            # Copy so a handler subscribing during dispatch does not run now
            for handler in list(self._handlers.get(key, ())):
                try:
                    results.append(handler(record))
                except Exception as exc:
                    logger.exception("Handler failed for event %s", key)
                    results.append({"error": str(exc)})
        finally:
            self._depth -= 1
        return results

    def history(self, event_type: Optional[EventKey] = None) -> Tuple[EventRecord, ...]:
        """Copy of the event log, optionally restricted to one type."""
        if event_type is None:
            return tuple(self._log)
        key = _key(event_type)
        return tuple(e for e in self._log if e.type == key)

    def handler_count(self, event_type: EventKey) -> int:
        return len(self._handlers.get(_key(event_type), ()))

    @property
    def depth(self) -> int:
        """Current nesting level of publish calls."""
        return self._depth

    def _serialize_payload(self, payload: Union[BaseModel, Dict[str, Any], None]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        if payload is None:
            return {}
        if isinstance(payload, BaseModel):
            return payload.model_dump(mode="json")
        return {key: self._serialize_value(value) for key, value in payload.items()}

    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, dict):
            return {str(k.value if isinstance(k, Enum) else k): self._serialize_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        return value
