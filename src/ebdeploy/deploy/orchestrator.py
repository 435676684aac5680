"""Publish-and-activate deployment workflow.

A deploy run either reuses a registered version or publishes a new one
(upload the artifact, register the version), then points the environment at
it and optionally waits until the environment is ready and healthy.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from ebdeploy.config.defaults import POLL_INTERVAL_SECONDS
from ebdeploy.deploy.clients import PlatformClients
from ebdeploy.deploy.observer import DeploymentObserver
from ebdeploy.deploy.poller import ReadinessPoller
from ebdeploy.deploy.session import DeploySession, truncate_description
from ebdeploy.deploy.source import SourceInfo
from ebdeploy.lib.logging_config import get_logger
from ebdeploy.models.deployment import DeploymentOutcome, DeploymentRequest

logger = get_logger(__name__)


class DeploymentOrchestrator:
    """Runs deploys against one set of platform clients.

    Each call to ``deploy`` uses a fresh DeploySession and ReadinessPoller, so
    no state leaks between runs. Concurrent deploys need separate instances.

    Example:
        >>> orchestrator = DeploymentOrchestrator(clients, GitSourceInfo())
        >>> outcome = orchestrator.deploy(request)
        >>> outcome.raise_for_failure()
    """

    def __init__(
        self,
        clients: PlatformClients,
        source: SourceInfo,
        observer: DeploymentObserver | None = None,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        wait_timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], None] | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            clients: Object store, version registry and environment controller
            source: Revision metadata and archive producer
            observer: Receives events and the final outcome
            poll_interval: Seconds between readiness polls
            wait_timeout: Readiness wait deadline in seconds (None waits forever)
            cancel_event: Cancels the readiness wait when set
            sleep: Sleep function for the readiness wait
            now: Clock returning the deploy start time
        """
        self._clients = clients
        self._source = source
        self._observer = observer or DeploymentObserver()
        self._poll_interval = poll_interval
        self._wait_timeout = wait_timeout
        self._cancel_event = cancel_event
        self._sleep = sleep
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.session: DeploySession | None = None

    def create_session(self, request: DeploymentRequest) -> DeploySession:
        return DeploySession(request, self._source, self._clients.object_store)

    def deploy(self, request: DeploymentRequest) -> DeploymentOutcome:
        """Run a deploy.

        Args:
            request: What to deploy and where

        Returns:
            The outcome; Failed when error events occurred while waiting

        Raises:
            DeploymentError: If any platform call fails (no step is retried)
            SourceControlError: If revision metadata or the archive is unavailable
        """
        session = self.session = self.create_session(request)
        started_at = self._now()
        archived = False
        logger.info(f"Deploying application {request.application_name}")

        try:
            if request.reuse_existing_version and self._clients.registry.exists(
                request.application_name, session.version_label
            ):
                logger.info(
                    f"Application version '{session.version_label}' already exists"
                )
                version_label = session.version_label
            else:
                artifact, archived = self._obtain_artifact(session)
                version_label = self._publish(session, artifact)

            if not request.publish_only and request.environment_name:
                self._clients.controller.activate(
                    request.environment_name, version_label
                )

            if request.skip_readiness_wait or not request.environment_name:
                outcome = DeploymentOutcome.success()
            else:
                outcome = self._create_poller().wait(
                    request.application_name, request.environment_name, started_at
                )
        finally:
            if archived and not request.skip_cleanup:
                self._source.cleanup()

        outcome = outcome.with_version(version_label)
        self._observer.on_outcome(outcome)
        return outcome

    def _obtain_artifact(self, session: DeploySession) -> tuple[Path, bool]:
        """Return the artifact path and whether it was archived by this run."""
        if session.request.artifact_path is not None:
            return session.request.artifact_path.resolve(), False
        return self._source.archive(Path(session.archive_name)), True

    def _publish(self, session: DeploySession, artifact: Path) -> str:
        """Upload the artifact and register a new version from it."""
        store = self._clients.object_store
        location = session.storage_location
        if not store.exists(location):
            store.create(location)

        key = session.artifact_key
        store.put(location, key, artifact)
        store.confirm_visible(location, key)

        return self._clients.registry.register(
            application_name=session.request.application_name,
            version_label=session.version_label,
            description=truncate_description(session.version_description),
            location=location,
            key=key,
        )

    def _create_poller(self) -> ReadinessPoller:
        kwargs = {"sleep": self._sleep} if self._sleep is not None else {}
        return ReadinessPoller(
            self._clients.controller,
            self._observer,
            interval=self._poll_interval,
            timeout=self._wait_timeout,
            cancel_event=self._cancel_event,
            **kwargs,
        )
