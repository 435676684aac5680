"""eb-deploy - Deploy applications to AWS Elastic Beanstalk.

Uploads a build artifact to S3, registers it as an application version,
points an environment at it and waits until the environment is ready,
failing the deploy when the environment reports error events.
"""

from ebdeploy.lib.errors import (
    ConfigError,
    DeploymentError,
    DeploymentFailedError,
    EBDeployError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigError",
    "DeploymentError",
    "DeploymentFailedError",
    "EBDeployError",
]
