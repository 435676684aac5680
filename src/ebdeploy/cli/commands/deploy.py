"""CLI command for deploying applications to Elastic Beanstalk.

Implements the 'eb-deploy deploy' command: publish a version, activate it in
an environment and wait for the environment to become ready.
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import click

from ebdeploy.config.loader import ConfigLoader
from ebdeploy.deploy.clients import create_platform_clients
from ebdeploy.deploy.observer import ConsoleObserver
from ebdeploy.deploy.orchestrator import DeploymentOrchestrator
from ebdeploy.deploy.source import GitSourceInfo
from ebdeploy.lib.errors import (
    ConfigError,
    DeploymentError,
    DeploymentFailedError,
    EBDeployError,
)
from ebdeploy.lib.logging_config import get_logger, setup_logging
from ebdeploy.models.deployment import AWSSettings, DeploymentRequest

logger = get_logger(__name__)


@contextmanager
def handle_deployment_errors() -> Generator[None, None, None]:
    """Context manager for consistent error handling in the deploy command.

    Exit codes:
        2: Configuration error
        3: Deployment/execution error
    """
    try:
        yield
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        click.secho("Error: Configuration error", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(2)
    except DeploymentFailedError as e:
        logger.error(f"Deployment failed: {e}")
        click.secho(f"Error: {e.message}", fg="red", err=True)
        for message in e.error_messages:
            click.echo(f"  {message}", err=True)
        sys.exit(3)
    except DeploymentError as e:
        logger.error(f"Deployment error: {e}")
        click.secho(f"Error: {e.operation} failed", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(3)
    except EBDeployError as e:
        logger.error(f"Error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(3)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(3)


@click.command()
@click.option(
    "--application-name",
    "-a",
    type=str,
    default=None,
    help="Name of the Elastic Beanstalk application",
)
@click.option(
    "--environment-name",
    "-e",
    type=str,
    default=None,
    help="Name of the Elastic Beanstalk environment",
)
@click.option(
    "--zip-file",
    "-z",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="ZIP file to deploy (default: git archive of HEAD)",
)
@click.option(
    "--bucket",
    "-b",
    type=str,
    default=None,
    help="S3 bucket to upload the ZIP file to (default: Elastic Beanstalk bucket)",
)
@click.option(
    "--bucket-path",
    "-P",
    type=str,
    default=None,
    help="Key prefix of the ZIP file within the S3 bucket",
)
@click.option(
    "--version-label",
    "-l",
    type=str,
    default=None,
    help="Version label of the new application version",
)
@click.option(
    "--version-description",
    "-d",
    type=str,
    default=None,
    help="Description of the new application version",
)
@click.option(
    "--use-existing-app-version",
    is_flag=True,
    help="Use an existing application version if one with the label exists",
)
@click.option(
    "--only-create-app-version",
    is_flag=True,
    help="Only create the application version without deploying it",
)
@click.option(
    "--skip-wait",
    is_flag=True,
    help="Do not wait until the environment is ready",
)
@click.option(
    "--skip-cleanup",
    is_flag=True,
    help="Do not run 'git clean' after deploying",
)
@click.option(
    "--wait-timeout",
    type=float,
    default=None,
    help="Give up waiting for the environment after this many seconds",
)
@click.option("--access-key-id", type=str, default=None, help="AWS access key id")
@click.option(
    "--secret-access-key", type=str, default=None, help="AWS secret access key"
)
@click.option("--session-token", type=str, default=None, help="AWS session token")
@click.option("--region", type=str, default=None, help="AWS region")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Project configuration file (default: .ebdeploy.yml)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug logging",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress progress output",
)
def deploy(
    application_name: str | None,
    environment_name: str | None,
    zip_file: str | None,
    bucket: str | None,
    bucket_path: str | None,
    version_label: str | None,
    version_description: str | None,
    use_existing_app_version: bool,
    only_create_app_version: bool,
    skip_wait: bool,
    skip_cleanup: bool,
    wait_timeout: float | None,
    access_key_id: str | None,
    secret_access_key: str | None,
    session_token: str | None,
    region: str | None,
    config_path: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Deploy an application version to an Elastic Beanstalk environment.

    Uploads the ZIP file to S3, creates a new application version, updates
    the environment and waits until it is ready. Error events reported while
    the environment updates fail the deploy.

    Example:

        eb-deploy deploy -a my-app -e my-app-prod

        eb-deploy deploy -a my-app -e my-app-prod -z build.zip --skip-wait
    """
    setup_logging(verbose=verbose, quiet=quiet)

    options: dict[str, Any] = {
        "application_name": application_name,
        "environment_name": environment_name,
        "artifact_path": zip_file,
        "storage_location": bucket,
        "storage_path": bucket_path,
        "version_label": version_label,
        "version_description": version_description,
        # Unset flags fall through to the project configuration file
        "reuse_existing_version": use_existing_app_version or None,
        "publish_only": only_create_app_version or None,
        "skip_readiness_wait": skip_wait or None,
        "skip_cleanup": skip_cleanup or None,
        "wait_timeout": wait_timeout,
        "access_key_id": access_key_id,
        "secret_access_key": secret_access_key,
        "session_token": session_token,
        "region": region,
    }

    with handle_deployment_errors():
        loader = ConfigLoader(config_path=config_path)
        request = loader.build_request(options)
        settings = loader.build_aws_settings(options)
        timeout = loader.wait_timeout(options)

        if not quiet:
            _display_configuration(request, settings)

        orchestrator = DeploymentOrchestrator(
            create_platform_clients(settings),
            GitSourceInfo(revision=loader.resolve("revision", {})),
            ConsoleObserver(quiet=quiet),
            wait_timeout=timeout,
        )
        outcome = orchestrator.deploy(request)
        outcome.raise_for_failure()

        if quiet:
            click.echo(outcome.version_label or "")
            return

        click.echo()
        click.secho("Deployment Successful!", fg="green", bold=True)
        target = request.environment_name or "(not activated)"
        click.echo(
            f"  Application {request.application_name} ({outcome.version_label}) "
            f"deployed in {target} environment."
        )
        click.echo()


def _display_configuration(request: DeploymentRequest, settings: AWSSettings) -> None:
    click.echo()
    click.secho("Deploy Configuration:", bold=True)
    click.echo(f"  Application: {request.application_name}")
    click.echo(f"  Environment: {request.environment_name or '(none)'}")
    click.echo(f"  Region:      {settings.region}")
    if request.version_label:
        click.echo(f"  Version:     {request.version_label}")
    if request.artifact_path:
        click.echo(f"  Artifact:    {request.artifact_path}")
    if request.storage_location:
        click.echo(f"  Bucket:      {request.storage_location}")
    click.echo()
