"""Pydantic models for eb-deploy."""

from ebdeploy.models.deployment import (
    AWSSettings,
    DeploymentOutcome,
    DeploymentRequest,
    OutcomeStatus,
)
from ebdeploy.models.events import EventRecord, EventSeverity

__all__ = [
    "AWSSettings",
    "DeploymentOutcome",
    "DeploymentRequest",
    "EventRecord",
    "EventSeverity",
    "OutcomeStatus",
]
