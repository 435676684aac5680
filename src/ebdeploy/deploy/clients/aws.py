"""AWS implementations of the platform collaborators.

Artifacts are stored in Amazon S3, versions and environments are managed
through AWS Elastic Beanstalk.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from ebdeploy.deploy.clients.base import (
    EnvironmentController,
    ObjectStore,
    VersionRegistry,
)
from ebdeploy.lib.errors import MalformedResponseError, PlatformError
from ebdeploy.lib.logging_config import get_logger
from ebdeploy.models.events import EventRecord, EventSeverity

logger = get_logger(__name__)

# Error codes S3 uses for a missing bucket
NOT_FOUND_CODES = frozenset({"404", "NotFound", "NoSuchBucket"})


def _error_code(exc: Exception) -> str | None:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", "")) or None
    return None


def _platform_error(operation: str, exc: Exception) -> PlatformError:
    """Wrap an AWS SDK exception, keeping the remote error code."""
    code = _error_code(exc)
    return PlatformError(operation=operation, message=str(exc), code=code)


class S3ObjectStore(ObjectStore):
    """Store deployment artifacts in Amazon S3."""

    def __init__(self, s3_client: Any, eb_client: Any) -> None:
        """Initialize the store.

        Args:
            s3_client: boto3 S3 client
            eb_client: boto3 Elastic Beanstalk client, used to resolve the
                default storage location
        """
        self._s3 = s3_client
        self._eb = eb_client

    def exists(self, location: str) -> bool:
        """Check whether the bucket exists."""
        try:
            self._s3.head_bucket(Bucket=location)
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_CODES:
                logger.debug(f"Bucket {location} not found")
                return False
            raise _platform_error("storage", exc) from exc
        except BotoCoreError as exc:
            raise _platform_error("storage", exc) from exc
        return True

    def create(self, location: str) -> None:
        """Create the bucket in the client's region."""
        params: dict[str, Any] = {"Bucket": location}
        region = getattr(self._s3.meta, "region_name", None)
        # us-east-1 rejects an explicit location constraint
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        logger.info(f"Creating bucket {location}")
        try:
            self._s3.create_bucket(**params)
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("storage", exc) from exc

    def default_location(self) -> str:
        """Return the Elastic Beanstalk managed bucket."""
        try:
            response = self._eb.create_storage_location()
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("storage", exc) from exc

        bucket = response.get("S3Bucket") if response else None
        if not bucket:
            raise MalformedResponseError(operation="storage", field="S3Bucket")
        return str(bucket)

    def put(self, location: str, key: str, file_path: Path) -> None:
        """Upload the artifact file."""
        try:
            body = file_path.read_bytes()
        except OSError as exc:
            raise PlatformError(
                operation="upload",
                message=f"Failed to read artifact {file_path}: {exc}",
            ) from exc

        logger.info(f"Uploading {file_path.name} to s3://{location}/{key}")
        try:
            self._s3.put_object(Bucket=location, Key=key, Body=body)
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("upload", exc) from exc

    def confirm_visible(self, location: str, key: str) -> None:
        """Wait until the object is readable."""
        try:
            self._s3.get_waiter("object_exists").wait(Bucket=location, Key=key)
        except WaiterError as exc:
            raise PlatformError(
                operation="upload",
                message=f"Uploaded artifact s3://{location}/{key} never became visible: {exc}",
            ) from exc
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("upload", exc) from exc


class BeanstalkVersionRegistry(VersionRegistry):
    """Register application versions in Elastic Beanstalk."""

    def __init__(self, eb_client: Any) -> None:
        self._eb = eb_client

    def exists(self, application_name: str, version_label: str) -> bool:
        """Check whether the application version is registered."""
        try:
            response = self._eb.describe_application_versions(
                ApplicationName=application_name,
                VersionLabels=[version_label],
            )
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("version lookup", exc) from exc

        versions = response.get("ApplicationVersions") if response else None
        if versions is None:
            raise MalformedResponseError(
                operation="version lookup", field="ApplicationVersions"
            )
        return len(versions) > 0

    def register(
        self,
        *,
        application_name: str,
        version_label: str,
        description: str,
        location: str,
        key: str,
    ) -> str:
        """Create the application version from the uploaded artifact."""
        logger.info(f"Creating application version {version_label}")
        try:
            response = self._eb.create_application_version(
                ApplicationName=application_name,
                VersionLabel=version_label,
                Description=description,
                SourceBundle={"S3Bucket": location, "S3Key": key},
                AutoCreateApplication=False,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("register", exc) from exc

        version = (response or {}).get("ApplicationVersion") or {}
        confirmed = version.get("VersionLabel")
        if not confirmed:
            raise MalformedResponseError(
                operation="register", field="ApplicationVersion.VersionLabel"
            )
        return str(confirmed)


class BeanstalkEnvironmentController(EnvironmentController):
    """Update and observe Elastic Beanstalk environments."""

    def __init__(self, eb_client: Any) -> None:
        self._eb = eb_client

    def activate(self, environment_name: str, version_label: str) -> None:
        """Deploy the version to the environment."""
        logger.info(f"Updating environment {environment_name} to {version_label}")
        try:
            self._eb.update_environment(
                EnvironmentName=environment_name,
                VersionLabel=version_label,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("activate", exc) from exc

    def status(self, application_name: str, environment_name: str) -> str:
        """Return the environment status (e.g. "Updating", "Ready")."""
        try:
            response = self._eb.describe_environments(
                ApplicationName=application_name,
                EnvironmentNames=[environment_name],
            )
        except (ClientError, BotoCoreError) as exc:
            raise _platform_error("status", exc) from exc

        environments = (response or {}).get("Environments") or []
        if not environments:
            raise MalformedResponseError(operation="status", field="Environments")
        status = environments[0].get("Status")
        if not status:
            raise MalformedResponseError(operation="status", field="Status")
        return str(status)

    def events(
        self, application_name: str, environment_name: str, since: datetime
    ) -> Sequence[EventRecord]:
        """Return environment events since the timestamp, newest first."""
        params: dict[str, Any] = {
            "ApplicationName": application_name,
            "EnvironmentName": environment_name,
            "StartTime": since,
        }
        records: list[EventRecord] = []
        while True:
            try:
                response = self._eb.describe_events(**params)
            except (ClientError, BotoCoreError) as exc:
                raise _platform_error("events", exc) from exc

            if not response or "Events" not in response:
                raise MalformedResponseError(operation="events", field="Events")
            records.extend(self._parse_event(event) for event in response["Events"])

            next_token = response.get("NextToken")
            if not next_token:
                return records
            params["NextToken"] = next_token

    @staticmethod
    def _parse_event(event: dict[str, Any]) -> EventRecord:
        """Convert a describe_events entry into an EventRecord."""
        timestamp = event.get("EventDate")
        if timestamp is None:
            raise MalformedResponseError(operation="events", field="EventDate")
        try:
            severity = EventSeverity(str(event.get("Severity", "")).upper())
        except ValueError as exc:
            raise MalformedResponseError(operation="events", field="Severity") from exc
        return EventRecord(
            timestamp=timestamp,
            severity=severity,
            message=event.get("Message", ""),
        )
