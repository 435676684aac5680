"""Readiness polling for environments being updated.

The poller samples the environment status and its event log at a fixed
interval until the status becomes terminal. Error events seen along the way
fail the deployment even when the environment itself reports ready.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime

from ebdeploy.config.defaults import POLL_INTERVAL_SECONDS, TERMINAL_STATUS
from ebdeploy.deploy.clients.base import EnvironmentController
from ebdeploy.deploy.observer import DeploymentObserver
from ebdeploy.lib.errors import DeploymentCancelledError, ReadinessTimeoutError
from ebdeploy.lib.logging_config import get_logger
from ebdeploy.models.deployment import DeploymentOutcome
from ebdeploy.models.events import EventRecord

logger = get_logger(__name__)


class SeenEventSet:
    """Append-only set of event signatures in first-seen order."""

    def __init__(self) -> None:
        self._signatures: dict[str, None] = {}

    def add(self, event: EventRecord) -> bool:
        """Record an event; return True if it had not been seen before."""
        signature = event.signature
        if signature in self._signatures:
            return False
        self._signatures[signature] = None
        return True

    def __contains__(self, event: object) -> bool:
        if isinstance(event, EventRecord):
            return event.signature in self._signatures
        return event in self._signatures

    def __iter__(self) -> Iterator[str]:
        return iter(self._signatures)

    def __len__(self) -> int:
        return len(self._signatures)


class ReadinessPoller:
    """Wait until an environment is ready and judge the deployment's health.

    Example:
        >>> poller = ReadinessPoller(controller, observer=ConsoleObserver())
        >>> outcome = poller.wait("shop", "shop-prod", since=start_time)
        >>> outcome.succeeded
        True
    """

    def __init__(
        self,
        controller: EnvironmentController,
        observer: DeploymentObserver | None = None,
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the poller.

        Args:
            controller: Environment status and event source
            observer: Receives each newly seen event
            interval: Seconds between polls
            timeout: Give up after this many seconds (None polls until ready)
            cancel_event: Stops polling when set
            sleep: Sleep function, replaced in tests
            clock: Monotonic clock used for the timeout
        """
        self._controller = controller
        self._observer = observer or DeploymentObserver()
        self._interval = interval
        self._timeout = timeout
        self._cancel_event = cancel_event
        self._sleep = sleep
        self._clock = clock

        self.seen = SeenEventSet()
        self.error_count = 0
        self.error_messages: list[str] = []

    def wait(
        self, application_name: str, environment_name: str, since: datetime
    ) -> DeploymentOutcome:
        """Poll until the environment reaches the terminal status.

        Args:
            application_name: Application owning the environment
            environment_name: Environment being updated
            since: Deploy start time; every event query uses this same value

        Returns:
            Success if no error events were seen, otherwise Failed with the
            error messages in the order they occurred

        Raises:
            ReadinessTimeoutError: If the timeout elapses first
            DeploymentCancelledError: If the cancel event is set
            DeploymentError: If a platform call fails
        """
        deadline = None if self._timeout is None else self._clock() + self._timeout
        polls = 0

        while True:
            polls += 1
            status = self._controller.status(application_name, environment_name)
            events = self._controller.events(application_name, environment_name, since)
            # Platform returns newest first
            self._process(reversed(list(events)))

            logger.debug(f"Poll {polls}: environment {environment_name} is {status}")
            if status == TERMINAL_STATUS:
                break

            if deadline is not None and self._clock() >= deadline:
                raise ReadinessTimeoutError(
                    timeout=self._timeout or 0.0,
                    error_messages=self.error_messages,
                )
            self._pause()

        if self.error_count > 0:
            logger.warning(
                f"Environment {environment_name} is {status} but reported "
                f"{self.error_count} error event(s)"
            )
            return DeploymentOutcome.failed(
                reason="Deployment failed.",
                error_messages=self.error_messages,
            )

        logger.info(f"Environment {environment_name} is {status}")
        return DeploymentOutcome.success()

    def _process(self, events: Iterable[EventRecord]) -> None:
        for event in events:
            if not self.seen.add(event):
                continue
            self._observer.on_event(event.signature, event)
            if event.severity.is_error:
                self.error_count += 1
                self.error_messages.append(event.message)

    def _pause(self) -> None:
        if self._cancel_event is None:
            self._sleep(self._interval)
            return
        if self._cancel_event.is_set() or self._cancel_event.wait(self._interval):
            raise DeploymentCancelledError(error_messages=self.error_messages)
