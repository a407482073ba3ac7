"""
Departments and their independent state enums.

Each department owns its own enum. Two departments sharing a literal state
name (admin and workshop both have "inProduction") is a coincidence of naming,
not a structural link.
"""

from enum import Enum
from typing import Union

from orderflow.exceptions import InvalidDepartmentError


class Department(str, Enum):
    """The three organizational units tracking an order."""

    COMMERCIAL = "commercial"
    ADMIN = "admin"
    WORKSHOP = "workshop"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str) and value.lower() == "administrative":
            return cls.ADMIN
        return None

    @classmethod
    def parse(cls, value: Union["Department", str]) -> "Department":
        """Coerce a key into a Department, raising InvalidDepartmentError."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidDepartmentError(value) from None


class CommercialState(str, Enum):
    """Lifecycle of the commercial department."""

    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    REVISED = "revised"
    ON_HOLD = "onHold"
    CANCELLED = "cancelled"


class AdminState(str, Enum):
    """Lifecycle of the administrative department."""

    CONFIRMED = "confirmed"
    PENDING_DOCS = "pendingDocs"
    IN_PRODUCTION = "inProduction"
    DELIVERED = "delivered"
    INVOICED = "invoiced"
    PAID = "paid"
    CANCELLED = "cancelled"
    INCIDENT = "incident"


class WorkshopState(str, Enum):
    """Lifecycle of the workshop department."""

    PENDING_DOCS = "pendingDocs"
    IN_PRODUCTION = "inProduction"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REVISED = "revised"
    INCIDENT = "incident"


class Priority(str, Enum):
    """Order priority."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
