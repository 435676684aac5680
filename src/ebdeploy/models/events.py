"""Environment event models reported by the hosting platform."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventSeverity(str, Enum):
    """Severity of an environment event, ordered from least to most severe."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @property
    def rank(self) -> int:
        """Position of the severity in the ordering (TRACE is 0)."""
        return list(EventSeverity).index(self)

    @property
    def is_error(self) -> bool:
        """Whether events of this severity fail a deployment."""
        return self.rank >= EventSeverity.ERROR.rank


class EventRecord(BaseModel):
    """A single environment event.

    Two records describe the same event when their signatures are equal.

    Attributes:
        timestamp: When the platform recorded the event
        severity: Event severity
        message: Event message text
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime = Field(..., description="Event timestamp")
    severity: EventSeverity = Field(..., description="Event severity")
    message: str = Field(default="", description="Event message")

    @property
    def signature(self) -> str:
        """Rendered form used for display and deduplication."""
        return f"{self.timestamp.isoformat()} [{self.severity.value}] {self.message}"
