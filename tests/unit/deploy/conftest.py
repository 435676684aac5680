"""In-memory collaborators for deployment workflow tests."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from ebdeploy.deploy.clients import PlatformClients
from ebdeploy.deploy.clients.base import (
    EnvironmentController,
    ObjectStore,
    VersionRegistry,
)
from ebdeploy.deploy.observer import DeploymentObserver
from ebdeploy.deploy.source import SourceInfo
from ebdeploy.models.deployment import DeploymentOutcome
from ebdeploy.models.events import EventRecord, EventSeverity

START_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _make_event(seconds: int, severity: EventSeverity, message: str) -> EventRecord:
    """Create an event a number of seconds after START_TIME."""
    return EventRecord(
        timestamp=START_TIME + timedelta(seconds=seconds),
        severity=severity,
        message=message,
    )


class FakeObjectStore(ObjectStore):
    def __init__(self, calls: list[tuple], exists: bool = True) -> None:
        self.calls = calls
        self.bucket_exists = exists
        self.default = "elasticbeanstalk-eu-central-1-123456789012"

    def exists(self, location: str) -> bool:
        self.calls.append(("exists", location))
        return self.bucket_exists

    def create(self, location: str) -> None:
        self.calls.append(("create", location))
        self.bucket_exists = True

    def default_location(self) -> str:
        self.calls.append(("default_location",))
        return self.default

    def put(self, location: str, key: str, file_path: Path) -> None:
        self.calls.append(("put", location, key, file_path))

    def confirm_visible(self, location: str, key: str) -> None:
        self.calls.append(("confirm_visible", location, key))


class FakeRegistry(VersionRegistry):
    def __init__(self, calls: list[tuple], existing: Sequence[str] = ()) -> None:
        self.calls = calls
        self.existing = set(existing)

    def exists(self, application_name: str, version_label: str) -> bool:
        self.calls.append(("version_exists", application_name, version_label))
        return version_label in self.existing

    def register(
        self,
        *,
        application_name: str,
        version_label: str,
        description: str,
        location: str,
        key: str,
    ) -> str:
        self.calls.append(
            ("register", application_name, version_label, description, location, key)
        )
        self.existing.add(version_label)
        return version_label


class FakeController(EnvironmentController):
    """Replays (status, newest-first events) pairs, one per poll."""

    def __init__(
        self,
        calls: list[tuple],
        polls: Sequence[tuple[str, Sequence[EventRecord]]] = (("Ready", ()),),
    ) -> None:
        self.calls = calls
        self.polls = list(polls)
        self.index = -1
        self.since: list[datetime] = []

    def activate(self, environment_name: str, version_label: str) -> None:
        self.calls.append(("activate", environment_name, version_label))

    def status(self, application_name: str, environment_name: str) -> str:
        self.index = min(self.index + 1, len(self.polls) - 1)
        return self.polls[self.index][0]

    def events(
        self, application_name: str, environment_name: str, since: datetime
    ) -> Sequence[EventRecord]:
        self.since.append(since)
        return list(self.polls[self.index][1])


class FakeSource(SourceInfo):
    def __init__(self, calls: list[tuple], tmp_path: Path) -> None:
        self.calls = calls
        self.tmp_path = tmp_path
        self.revision_calls = 0

    def current_revision(self) -> str:
        self.revision_calls += 1
        return "abc1234"

    def commit_message(self, revision: str) -> str:
        return f"Commit {revision}"

    def archive(self, destination: Path) -> Path:
        self.calls.append(("archive", destination.name))
        path = self.tmp_path / destination.name
        path.write_bytes(b"PK")
        return path

    def cleanup(self) -> None:
        self.calls.append(("cleanup",))


class RecordingObserver(DeploymentObserver):
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.outcomes: list[DeploymentOutcome] = []

    def on_event(self, line: str, event: EventRecord) -> None:
        self.lines.append(line)

    def on_outcome(self, outcome: DeploymentOutcome) -> None:
        self.outcomes.append(outcome)


@pytest.fixture
def start_time() -> datetime:
    return START_TIME


@pytest.fixture
def make_event():
    """Factory for events a number of seconds after the deploy start."""
    return _make_event


@pytest.fixture
def calls() -> list[tuple]:
    return []


@pytest.fixture
def object_store(calls: list[tuple]) -> FakeObjectStore:
    return FakeObjectStore(calls)


@pytest.fixture
def registry(calls: list[tuple]) -> FakeRegistry:
    return FakeRegistry(calls)


@pytest.fixture
def controller(calls: list[tuple]) -> FakeController:
    return FakeController(calls)


@pytest.fixture
def source(calls: list[tuple], tmp_path: Path) -> FakeSource:
    return FakeSource(calls, tmp_path)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def clients(
    object_store: FakeObjectStore, registry: FakeRegistry, controller: FakeController
) -> PlatformClients:
    return PlatformClients(
        object_store=object_store, registry=registry, controller=controller
    )
