"""Notification Service - publishes immediate actions for emergency assessments."""

from .publisher import (
    ImmediateActionEvent,
    ImmediateActionPublisher,
)

__all__ = [
    "ImmediateActionEvent",
    "ImmediateActionPublisher",
]
