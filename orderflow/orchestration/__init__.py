"""Orchestration layer - department state machines, workflow coordinator, reaction rules."""

from orderflow.orchestration.coordinator import DepartmentView, WorkflowCoordinator
from orderflow.orchestration.machines import MACHINES, DepartmentStateMachine, get_machine
from orderflow.orchestration.reactions import Notification, NotificationCenter, register_reaction_rules

__all__ = [
    "WorkflowCoordinator",
    "DepartmentView",
    "DepartmentStateMachine",
    "MACHINES",
    "get_machine",
    "register_reaction_rules",
    "NotificationCenter",
    "Notification",
]
