"""Hosting platform collaborators used by the deployment orchestrator."""

from __future__ import annotations

from dataclasses import dataclass

import boto3
from botocore.exceptions import BotoCoreError

from ebdeploy.deploy.clients.base import (
    EnvironmentController,
    ObjectStore,
    VersionRegistry,
)
from ebdeploy.lib.errors import ConfigError
from ebdeploy.models.deployment import AWSSettings


@dataclass(frozen=True)
class PlatformClients:
    """The collaborators a deploy run talks to."""

    object_store: ObjectStore
    registry: VersionRegistry
    controller: EnvironmentController


def create_session(settings: AWSSettings) -> boto3.session.Session:
    """Create a boto3 session for the configured region and credentials."""
    kwargs: dict[str, str] = {"region_name": settings.region}
    if settings.has_static_credentials:
        kwargs["aws_access_key_id"] = settings.access_key_id or ""
        kwargs["aws_secret_access_key"] = settings.secret_access_key or ""
        if settings.session_token:
            kwargs["aws_session_token"] = settings.session_token
    return boto3.session.Session(**kwargs)


def create_platform_clients(settings: AWSSettings) -> PlatformClients:
    """Create the AWS collaborators (S3 + Elastic Beanstalk) for a deploy run."""
    from ebdeploy.deploy.clients.aws import (
        BeanstalkEnvironmentController,
        BeanstalkVersionRegistry,
        S3ObjectStore,
    )

    try:
        session = create_session(settings)
        s3_client = session.client("s3")
        eb_client = session.client("elasticbeanstalk")
    except BotoCoreError as exc:
        raise ConfigError(
            field="aws", message=f"Failed to create AWS clients: {exc}"
        ) from exc

    return PlatformClients(
        object_store=S3ObjectStore(s3_client, eb_client),
        registry=BeanstalkVersionRegistry(eb_client),
        controller=BeanstalkEnvironmentController(eb_client),
    )


__all__ = [
    "EnvironmentController",
    "ObjectStore",
    "PlatformClients",
    "VersionRegistry",
    "create_platform_clients",
    "create_session",
]
