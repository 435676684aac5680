"""Configuration loader for eb-deploy.

Merges CLI options, environment variables and the optional project
configuration file into a validated DeploymentRequest and AWSSettings.

Precedence (highest to lowest):
1. CLI options
2. Environment variables
3. Project configuration file (.ebdeploy.yml)
4. Built-in defaults
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from ebdeploy.config.defaults import DEFAULT_CONFIG_FILES, ENV_VAR_MAP
from ebdeploy.config.env_loader import get_env_var, substitute_env_vars
from ebdeploy.config.validator import flatten_pydantic_errors
from ebdeploy.lib.errors import ConfigError
from ebdeploy.models.deployment import AWSSettings, DeploymentRequest

logger = logging.getLogger(__name__)

REQUEST_FIELDS = frozenset(DeploymentRequest.model_fields)
AWS_FIELDS = frozenset(AWSSettings.model_fields)

# Settings that may appear in the project file but are not request fields
EXTRA_FILE_FIELDS = frozenset({"wait_timeout"})


class ConfigLoader:
    """Builds deploy settings from CLI options, environment and config file.

    Example:
        >>> loader = ConfigLoader(env={"ELASTIC_BEANSTALK_ENVIRONMENT": "prod"})
        >>> request = loader.build_request({"application_name": "shop"})
        >>> request.environment_name
        'prod'
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            config_path: Explicit project configuration file
            env: Environment mapping, defaults to os.environ
            cwd: Directory searched for the default configuration files
        """
        self._env: Mapping[str, str] = os.environ if env is None else env
        self._cwd = cwd or Path.cwd()
        self._config_path = Path(config_path) if config_path else None
        self._file_config: dict[str, Any] | None = None

    @property
    def env(self) -> Mapping[str, str]:
        """Environment mapping used for fallbacks."""
        return self._env

    def find_config_file(self) -> Path | None:
        """Return the project configuration file, if any."""
        if self._config_path is not None:
            return self._config_path
        for name in DEFAULT_CONFIG_FILES:
            candidate = self._cwd / name
            if candidate.is_file():
                return candidate
        return None

    def load_file_config(self) -> dict[str, Any]:
        """Load the project configuration file (cached).

        Returns:
            Mapping of setting name to value; empty when no file exists

        Raises:
            ConfigError: If the file cannot be read, parsed or has unknown keys
        """
        if self._file_config is not None:
            return self._file_config

        path = self.find_config_file()
        if path is None:
            self._file_config = {}
            return self._file_config

        try:
            raw_text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(
                "config_file", f"Failed to read configuration file {path}: {e}"
            ) from e

        try:
            content = yaml.safe_load(substitute_env_vars(raw_text, self._env))
        except yaml.YAMLError as e:
            raise ConfigError(
                "yaml_parse", f"Failed to parse YAML file {path}: {e}"
            ) from e

        if content is None:
            content = {}
        if not isinstance(content, dict):
            raise ConfigError(
                "config_file", f"Configuration file {path} must contain a mapping"
            )

        config = {str(key).replace("-", "_"): value for key, value in content.items()}
        unknown = set(config) - REQUEST_FIELDS - AWS_FIELDS - EXTRA_FILE_FIELDS
        if unknown:
            raise ConfigError(
                "config_file",
                f"Unknown settings in {path}: {', '.join(sorted(unknown))}",
            )

        logger.debug(f"Loaded project configuration from {path}")
        self._file_config = config
        return config

    def resolve(self, name: str, options: Mapping[str, Any]) -> Any:
        """Resolve one setting using CLI > environment > file precedence."""
        value = options.get(name)
        if value is not None:
            return value

        env_name = ENV_VAR_MAP.get(name)
        if env_name:
            env_value = get_env_var(env_name, self._env)
            if env_value is not None:
                return env_value

        return self.load_file_config().get(name)

    def build_request(self, options: Mapping[str, Any]) -> DeploymentRequest:
        """Build a validated DeploymentRequest.

        Boolean flags are enabled when set either on the command line or in
        the project file.

        Raises:
            ConfigError: If the merged settings are invalid
        """
        values: dict[str, Any] = {}
        for name in REQUEST_FIELDS:
            value = self.resolve(name, options)
            if value is not None:
                values[name] = value

        try:
            return DeploymentRequest(**values)
        except PydanticValidationError as e:
            raise ConfigError(
                "deployment_request", "\n".join(flatten_pydantic_errors(e))
            ) from e

    def build_aws_settings(self, options: Mapping[str, Any]) -> AWSSettings:
        """Build AWS connection settings.

        Raises:
            ConfigError: If the merged settings are invalid
        """
        values: dict[str, Any] = {}
        for name in AWS_FIELDS:
            value = self.resolve(name, options)
            if value is not None:
                values[name] = value

        try:
            return AWSSettings(**values)
        except PydanticValidationError as e:
            raise ConfigError(
                "aws_settings", "\n".join(flatten_pydantic_errors(e))
            ) from e

    def wait_timeout(self, options: Mapping[str, Any]) -> float | None:
        """Return the readiness wait timeout in seconds, if configured."""
        value = self.resolve("wait_timeout", options)
        if value is None:
            return None
        try:
            timeout = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                "wait_timeout", f"Expected a number of seconds, got {value!r}"
            ) from e
        if timeout <= 0:
            raise ConfigError("wait_timeout", "Timeout must be greater than zero")
        return timeout
