"""Per-run deploy state with lazily computed, memoized values."""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import cached_property

from ebdeploy.config.defaults import ARCHIVE_EXTENSION, DESCRIPTION_MAX_LENGTH
from ebdeploy.deploy.clients.base import ObjectStore
from ebdeploy.deploy.source import SourceInfo
from ebdeploy.lib.logging_config import get_logger
from ebdeploy.models.deployment import DeploymentRequest

logger = get_logger(__name__)


def truncate_description(description: str) -> str:
    """Shorten a version description to the platform limit."""
    return description[:DESCRIPTION_MAX_LENGTH]


def build_artifact_key(
    archive_name: str, application_name: str, storage_path: str | None = None
) -> str:
    """Return the object key an artifact is uploaded under.

    Example:
        >>> build_artifact_key("v1.zip", "shop", "releases")
        'releases/v1.zip'
        >>> build_artifact_key("v1.zip", "shop")
        'shop/v1.zip'
    """
    prefix = storage_path or application_name
    return f"{prefix}/{archive_name}"


class DeploySession:
    """Values derived once for a single deploy run.

    Every value is computed on first access and stays stable for the rest of
    the run, so the version label and storage location never change midway.
    """

    def __init__(
        self,
        request: DeploymentRequest,
        source: SourceInfo,
        object_store: ObjectStore,
        millis: Callable[[], int] | None = None,
    ) -> None:
        self.request = request
        self._source = source
        self._object_store = object_store
        self._millis = millis or (lambda: time.time_ns() // 1_000_000)

    @cached_property
    def revision(self) -> str:
        return self._source.current_revision()

    @cached_property
    def commit_message(self) -> str:
        return self._source.commit_message(self.revision)

    @cached_property
    def version_label(self) -> str:
        """Caller supplied label, else ``sha-<revision>-<epoch millis>``."""
        if self.request.version_label:
            return self.request.version_label
        label = f"sha-{self.revision}-{self._millis()}"
        logger.debug(f"Derived version label {label}")
        return label

    @cached_property
    def version_description(self) -> str:
        """Caller supplied description, else the commit message."""
        if self.request.version_description is not None:
            return self.request.version_description
        return self.commit_message

    @cached_property
    def archive_name(self) -> str:
        return f"{self.version_label}{ARCHIVE_EXTENSION}"

    @cached_property
    def storage_location(self) -> str:
        """Requested bucket, else the platform default (resolved once)."""
        if self.request.storage_location:
            return self.request.storage_location
        location = self._object_store.default_location()
        logger.info(f"Using default storage location {location}")
        return location

    @property
    def artifact_key(self) -> str:
        return build_artifact_key(
            self.archive_name,
            self.request.application_name,
            self.request.storage_path,
        )
