"""Custom exception hierarchy for eb-deploy configuration and operations."""

from __future__ import annotations


class EBDeployError(Exception):
    """Base exception for all eb-deploy errors.

    All eb-deploy specific exceptions inherit from this class, enabling
    centralized exception handling in the CLI.
    """

    pass


class ConfigError(EBDeployError):
    """Exception raised for configuration errors.

    Raised when settings are missing or invalid after merging CLI options,
    environment variables and the project configuration file.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class SourceControlError(EBDeployError):
    """Exception raised when a git command fails.

    Attributes:
        command: The git command that failed
        message: Human-readable error message
    """

    def __init__(self, command: str, message: str) -> None:
        """Create a source control error with the failing command."""
        self.command = command
        self.message = message
        super().__init__(f"'{command}' failed: {message}")


class DeploymentError(EBDeployError):
    """Exception raised when a deployment step fails.

    Attributes:
        operation: The workflow step that failed (e.g. "upload", "activate")
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str) -> None:
        """Initialize DeploymentError with operation and message.

        Args:
            operation: Name of the deployment operation that failed
            message: Descriptive error message
        """
        self.operation = operation
        self.message = message
        super().__init__(f"Deployment {operation} failed: {message}")


class PlatformError(DeploymentError):
    """Transport or permission error returned by the hosting platform.

    Attributes:
        code: Error code reported by the platform, if any
    """

    def __init__(self, operation: str, message: str, code: str | None = None) -> None:
        """Create a platform error, keeping the remote error code."""
        self.code = code
        super().__init__(operation=operation, message=message)


class MalformedResponseError(DeploymentError):
    """Platform response is missing a field the workflow depends on.

    Attributes:
        field: Name of the missing response field
    """

    def __init__(self, operation: str, field: str) -> None:
        """Create a malformed response error for the missing field."""
        self.field = field
        super().__init__(
            operation=operation,
            message=f"Unexpected response from platform: missing '{field}'",
        )


class DeploymentFailedError(DeploymentError):
    """Environment converged but error events were reported while deploying.

    Attributes:
        error_messages: Messages of every error-severity event, oldest first
    """

    def __init__(self, message: str, error_messages: list[str] | None = None) -> None:
        """Create a failed deployment error carrying the error event messages."""
        self.error_messages = list(error_messages or [])
        super().__init__(operation="deploy", message=message)


class ReadinessTimeoutError(DeploymentError):
    """Environment did not reach the terminal status before the deadline."""

    def __init__(self, timeout: float, error_messages: list[str] | None = None) -> None:
        """Create a timeout error for the given deadline in seconds."""
        self.timeout = timeout
        self.error_messages = list(error_messages or [])
        super().__init__(
            operation="wait",
            message=f"Environment was not ready after {timeout:g} seconds",
        )


class DeploymentCancelledError(DeploymentError):
    """Readiness wait was cancelled before the environment became ready."""

    def __init__(self, error_messages: list[str] | None = None) -> None:
        """Create a cancellation error."""
        self.error_messages = list(error_messages or [])
        super().__init__(operation="wait", message="Readiness wait was cancelled")
