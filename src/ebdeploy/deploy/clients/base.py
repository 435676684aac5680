"""Base interfaces for the hosting platform collaborators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from ebdeploy.models.events import EventRecord


class ObjectStore(ABC):
    """Durable storage holding deployment artifacts."""

    @abstractmethod
    def exists(self, location: str) -> bool:
        """Check whether a storage location exists.

        Args:
            location: Storage location (bucket) name.

        Returns:
            False only when the platform reports the location as not found.

        Raises:
            PlatformError: For any other transport or permission error.
        """

    @abstractmethod
    def create(self, location: str) -> None:
        """Create a storage location.

        Raises:
            PlatformError: If the location cannot be created.
        """

    @abstractmethod
    def default_location(self) -> str:
        """Return the platform default storage location, creating it if needed.

        Raises:
            PlatformError: If the location cannot be resolved.
            MalformedResponseError: If the response has no location name.
        """

    @abstractmethod
    def put(self, location: str, key: str, file_path: Path) -> None:
        """Upload a file under the given key.

        Raises:
            PlatformError: If the upload fails.
        """

    @abstractmethod
    def confirm_visible(self, location: str, key: str) -> None:
        """Block until the uploaded object is readable.

        Raises:
            PlatformError: If the object never becomes visible.
        """


class VersionRegistry(ABC):
    """Registry of deployable application versions."""

    @abstractmethod
    def exists(self, application_name: str, version_label: str) -> bool:
        """Check whether a version label is already registered.

        Raises:
            MalformedResponseError: If the response lacks the version list.
            PlatformError: For transport or permission errors.
        """

    @abstractmethod
    def register(
        self,
        *,
        application_name: str,
        version_label: str,
        description: str,
        location: str,
        key: str,
    ) -> str:
        """Register a new version pointing at an uploaded artifact.

        Args:
            application_name: Application the version belongs to.
            version_label: Label of the new version.
            description: Version description (at most 200 characters).
            location: Storage location holding the artifact.
            key: Artifact key inside the location.

        Returns:
            The version label confirmed by the platform.

        Raises:
            MalformedResponseError: If the response lacks the version label.
            PlatformError: For transport or permission errors.
        """


class EnvironmentController(ABC):
    """Controls and observes a running environment."""

    @abstractmethod
    def activate(self, environment_name: str, version_label: str) -> None:
        """Point the environment at a version.

        Raises:
            PlatformError: If the update is rejected.
        """

    @abstractmethod
    def status(self, application_name: str, environment_name: str) -> str:
        """Return the current environment status token.

        Raises:
            MalformedResponseError: If the environment is missing from the response.
            PlatformError: For transport or permission errors.
        """

    @abstractmethod
    def events(
        self, application_name: str, environment_name: str, since: datetime
    ) -> Sequence[EventRecord]:
        """Return all environment events since a timestamp, newest first.

        Raises:
            PlatformError: For transport or permission errors.
        """
