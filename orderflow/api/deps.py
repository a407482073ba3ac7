"""
FastAPI dependencies for the workflow engine.
"""

from typing import Annotated

from fastapi import Depends, Request

from orderflow.orchestration.coordinator import WorkflowCoordinator
from orderflow.orchestration.reactions import NotificationCenter


def get_coordinator(request: Request) -> WorkflowCoordinator:
    """The coordinator built by create_app."""
    return request.app.state.coordinator


def get_notification_center(request: Request) -> NotificationCenter:
    return request.app.state.notifications


Coordinator = Annotated[WorkflowCoordinator, Depends(get_coordinator)]
Notifications = Annotated[NotificationCenter, Depends(get_notification_center)]
