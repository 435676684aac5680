"""Observers receiving deployment progress."""

from __future__ import annotations

import click

from ebdeploy.models.deployment import DeploymentOutcome
from ebdeploy.models.events import EventRecord


class DeploymentObserver:
    """Receives newly seen events and the final outcome.

    The base implementation ignores everything.
    """

    def on_event(self, line: str, event: EventRecord) -> None:
        """Handle a newly seen event rendered as ``<timestamp> [<severity>] <message>``."""

    def on_outcome(self, outcome: DeploymentOutcome) -> None:
        """Handle the final deploy outcome."""


class ConsoleObserver(DeploymentObserver):
    """Print events to the terminal as they arrive.

    Error events go to stderr in red, everything else is dimmed.
    """

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def on_event(self, line: str, event: EventRecord) -> None:
        if event.severity.is_error:
            click.secho(line, fg="red", err=True)
        elif not self.quiet:
            click.secho(line, dim=True)
