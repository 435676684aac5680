"""Pydantic models for deployment requests and results.

This module defines the input of a deploy run, the AWS connection settings
and the terminal outcome reported back to the caller.
"""

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ebdeploy.config.defaults import DEFAULT_REGION
from ebdeploy.lib.errors import DeploymentFailedError

# S3 bucket naming rules (length 3-63, lowercase, digits, dots, hyphens)
BUCKET_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")


class DeploymentRequest(BaseModel):
    """Immutable input of a single deploy run.

    Attributes:
        application_name: Elastic Beanstalk application name
        environment_name: Environment to activate the version in
        version_label: Explicit version label (derived from git when absent)
        version_description: Explicit description (commit message when absent)
        artifact_path: Prebuilt zip file (a git archive is created when absent)
        storage_location: S3 bucket for the artifact (platform default when absent)
        storage_path: Key prefix of the artifact inside the bucket
        reuse_existing_version: Activate an already registered version if found
        publish_only: Register the version without activating it
        skip_readiness_wait: Do not wait for the environment to become ready
        skip_cleanup: Do not clean the working tree after deploying
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    application_name: str = Field(..., min_length=1, description="Application name")
    environment_name: str | None = Field(default=None, description="Environment name")
    version_label: str | None = Field(default=None, description="Version label")
    version_description: str | None = Field(
        default=None, description="Version description"
    )
    artifact_path: Path | None = Field(default=None, description="Prebuilt zip file")
    storage_location: str | None = Field(default=None, description="S3 bucket name")
    storage_path: str | None = Field(default=None, description="S3 key prefix")
    reuse_existing_version: bool = Field(
        default=False, description="Reuse an existing version with the same label"
    )
    publish_only: bool = Field(
        default=False, description="Only register the version, do not activate it"
    )
    skip_readiness_wait: bool = Field(
        default=False, description="Do not wait until the environment is ready"
    )
    skip_cleanup: bool = Field(
        default=False, description="Do not clean the working tree after deploying"
    )

    @field_validator("storage_location")
    @classmethod
    def validate_storage_location(cls, v: str | None) -> str | None:
        """Validate the bucket name against S3 naming rules."""
        if v is not None and not BUCKET_NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid bucket name: {v}. "
                "Must be 3-63 lowercase letters, numbers, '.' or '-'"
            )
        return v

    @field_validator("storage_path")
    @classmethod
    def normalize_storage_path(cls, v: str | None) -> str | None:
        """Strip surrounding slashes so keys never contain '//'."""
        if v is None:
            return None
        return v.strip("/") or None

    @model_validator(mode="after")
    def validate_environment(self) -> "DeploymentRequest":
        """Require an environment unless the version is only published."""
        if not self.environment_name and not self.publish_only:
            raise ValueError(
                "environment_name is required unless publish_only is set"
            )
        return self


class AWSSettings(BaseModel):
    """AWS connection settings.

    Static credentials are only used when both the key id and the secret are
    set; otherwise the default boto3 credential chain applies.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    region: str = Field(default=DEFAULT_REGION, description="AWS region")
    access_key_id: str | None = Field(default=None, description="AWS access key id")
    secret_access_key: str | None = Field(
        default=None, description="AWS secret access key"
    )
    session_token: str | None = Field(default=None, description="AWS session token")

    @property
    def has_static_credentials(self) -> bool:
        """Whether explicit credentials were configured."""
        return bool(self.access_key_id and self.secret_access_key)


class OutcomeStatus(str, Enum):
    """Terminal status of a deploy run."""

    SUCCESS = "success"
    FAILED = "failed"


class DeploymentOutcome(BaseModel):
    """Terminal value of a deploy attempt.

    Attributes:
        status: Whether the deploy succeeded
        version_label: Version the environment was pointed at
        reason: Failure reason (None on success)
        error_messages: Error event messages observed while waiting
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: OutcomeStatus = Field(..., description="Outcome status")
    version_label: str | None = Field(default=None, description="Version label")
    reason: str | None = Field(default=None, description="Failure reason")
    error_messages: list[str] = Field(
        default_factory=list, description="Error event messages"
    )

    @classmethod
    def success(cls, version_label: str | None = None) -> "DeploymentOutcome":
        """Create a successful outcome."""
        return cls(status=OutcomeStatus.SUCCESS, version_label=version_label)

    @classmethod
    def failed(
        cls,
        reason: str,
        error_messages: list[str] | None = None,
        version_label: str | None = None,
    ) -> "DeploymentOutcome":
        """Create a failed outcome."""
        return cls(
            status=OutcomeStatus.FAILED,
            reason=reason,
            error_messages=list(error_messages or []),
            version_label=version_label,
        )

    @property
    def succeeded(self) -> bool:
        """Whether the deploy succeeded."""
        return self.status == OutcomeStatus.SUCCESS

    def with_version(self, version_label: str) -> "DeploymentOutcome":
        """Return a copy bound to the given version label."""
        return self.model_copy(update={"version_label": version_label})

    def raise_for_failure(self) -> None:
        """Raise DeploymentFailedError if the deploy failed."""
        if not self.succeeded:
            raise DeploymentFailedError(
                message=self.reason or "Deployment failed.",
                error_messages=self.error_messages,
            )
