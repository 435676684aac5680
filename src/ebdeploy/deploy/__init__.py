"""eb-deploy deployment engine.

This package provides the publish-and-activate workflow, readiness polling
and the AWS collaborators it runs against.
"""

from ebdeploy.deploy.observer import ConsoleObserver, DeploymentObserver
from ebdeploy.deploy.orchestrator import DeploymentOrchestrator
from ebdeploy.deploy.poller import ReadinessPoller, SeenEventSet
from ebdeploy.deploy.session import DeploySession, build_artifact_key
from ebdeploy.deploy.source import GitSourceInfo, SourceInfo

__all__ = [
    "ConsoleObserver",
    "DeploySession",
    "DeploymentObserver",
    "DeploymentOrchestrator",
    "GitSourceInfo",
    "ReadinessPoller",
    "SeenEventSet",
    "SourceInfo",
    "build_artifact_key",
]
