"""
Pydantic schemas for API request/response validation.
"""

from orderflow.schemas.common import ErrorResponse, HealthResponse, SuccessResponse
from orderflow.schemas.order import (
    EligibilityResponse,
    OrderCreate,
    PartialUpdateRequest,
    PartialUpdateResponse,
    StateCountsResponse,
    TransitionRequest,
)

__all__ = [
    # Common
    "ErrorResponse",
    "SuccessResponse",
    "HealthResponse",
    # Orders
    "OrderCreate",
    "TransitionRequest",
    "PartialUpdateRequest",
    "PartialUpdateResponse",
    "EligibilityResponse",
    "StateCountsResponse",
]
