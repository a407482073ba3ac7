"""
Order Workflow Engine

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from orderflow.api.middleware.request_id import RequestIdMiddleware
from orderflow.api.v1 import router as api_v1_router
from orderflow.config import Settings, get_settings
from orderflow.exceptions import (
    InvalidDepartmentError,
    NotFoundError,
    TransitionError,
    ValidationError,
    WorkflowError,
)
from orderflow.kernel.events.event_bus import EventBus
from orderflow.kernel.store.repository import ArtifactStore, InMemoryArtifactStore
from orderflow.kernel.store.sql_store import SqlArtifactStore
from orderflow.logging_config import configure_logging, get_logger
from orderflow.orchestration.coordinator import WorkflowCoordinator
from orderflow.orchestration.reactions import NotificationCenter, register_reaction_rules
from orderflow.schemas.common import HealthResponse

logger = get_logger(__name__)

# Named HTTP_422_UNPROCESSABLE_ENTITY or _CONTENT depending on the Starlette release
HTTP_422_UNPROCESSABLE = 422

_ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidDepartmentError: status.HTTP_400_BAD_REQUEST,
    TransitionError: status.HTTP_409_CONFLICT,
    ValidationError: HTTP_422_UNPROCESSABLE,
}


def build_coordinator(settings: Settings) -> WorkflowCoordinator:
    """Coordinator with reaction rules wired, on the configured store backend."""
    store: ArtifactStore
    if settings.store_backend == "sql":
        store = SqlArtifactStore.from_url(settings.database_url)
    elif settings.store_backend == "memory":
        store = InMemoryArtifactStore()
    else:
        raise ValueError(f"Unknown store backend: {settings.store_backend}")

    coordinator = WorkflowCoordinator(store=store, bus=EventBus(max_depth=settings.reaction_max_depth))
    register_reaction_rules(coordinator.bus, coordinator)
    return coordinator


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def create_app(
    coordinator: Optional[WorkflowCoordinator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the application.

    A coordinator passed in is used as is, with its reaction rules already
    registered; otherwise one is built from settings.
    """
    settings = settings or get_settings()
    coordinator = coordinator or build_coordinator(settings)
    notifications = NotificationCenter(coordinator.bus)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        Application lifespan handler.

        Runs startup and shutdown tasks.
        """
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )
        logger.info(
            "Starting %s v%s (store: %s)",
            settings.project_name,
            settings.version,
            settings.store_backend,
        )

        yield

        logger.info("Shutting down...")
        coordinator.store.close()
        logger.info("Store closed")

    app = FastAPI(
        title=settings.project_name,
        description="""
    Order Workflow Engine

    One customer order, three departments (commercial, admin, workshop),
    each with its own state machine. State changes in one department trigger
    reactions in the others through an in-process event bus.
    """,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.coordinator = coordinator
    app.state.notifications = notifications

    app.add_middleware(RequestIdMiddleware)

    @app.exception_handler(WorkflowError)
    async def workflow_exception_handler(request: Request, exc: WorkflowError):
        """Map domain errors onto HTTP status codes."""
        status_code = next(
            (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
            status.HTTP_400_BAD_REQUEST,
        )
        content = {"detail": str(exc)}
        if isinstance(exc, ValidationError):
            content["errors"] = exc.errors
        req_id = _request_id(request)
        headers = {"X-Request-ID": req_id} if req_id else None
        return JSONResponse(status_code=status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        content = {"detail": "Validation error", "errors": errors}
        req_id = _request_id(request)
        if req_id:
            content["request_id"] = req_id
        return JSONResponse(status_code=HTTP_422_UNPROCESSABLE, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception: %s", exc)
        req_id = _request_id(request)
        if settings.debug:
            content = {
                "detail": str(exc),
                "type": type(exc).__name__,
                "request_id": req_id,
            }
        else:
            content = {"detail": "Internal server error", "request_id": req_id}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        return HealthResponse(
            status="ok",
            version=settings.version,
            store=settings.store_backend,
        )

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs" if settings.debug else "disabled",
            "api": {
                "v1": settings.api_v1_prefix,
            },
        }

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)
    return app


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "orderflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
