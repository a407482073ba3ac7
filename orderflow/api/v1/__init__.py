"""
API v1 routes.
"""

from fastapi import APIRouter

from orderflow.api.v1 import departments, events, orders
from orderflow.schemas.common import ErrorResponse

# Bodies written by the domain error handlers in main.create_app
_ORDER_ERRORS = {
    400: {"model": ErrorResponse, "description": "Unknown department"},
    404: {"model": ErrorResponse, "description": "Order not found"},
    409: {"model": ErrorResponse, "description": "Transition not allowed"},
    422: {"model": ErrorResponse, "description": "Missing or invalid data"},
}

router = APIRouter()

router.include_router(orders.router, prefix="/orders", tags=["Orders"], responses=_ORDER_ERRORS)
router.include_router(
    departments.router,
    prefix="/departments",
    tags=["Departments"],
    responses={400: _ORDER_ERRORS[400], 404: {"model": ErrorResponse, "description": "Unknown state"}},
)
router.include_router(events.router, tags=["Events"])
