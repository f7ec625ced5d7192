"""Orchestration layer - workflow state machine and action surface."""

from src.orchestration.state_machine import WorkflowEngine, get_rule, valid_transitions
from src.orchestration.actions import ACTION_TARGETS, ActionSurface, WorkflowAction

__all__ = [
    "WorkflowEngine",
    "get_rule",
    "valid_transitions",
    "ACTION_TARGETS",
    "ActionSurface",
    "WorkflowAction",
]
