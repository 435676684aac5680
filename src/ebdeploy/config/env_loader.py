"""Environment variable helpers for configuration files."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

from ebdeploy.lib.errors import ConfigError

# ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def get_env_var(name: str, env: Mapping[str, str] | None = None) -> str | None:
    """Return a non-empty environment variable value, or None."""
    source = os.environ if env is None else env
    value = source.get(name)
    return value if value else None


def substitute_env_vars(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace ${VAR} and ${VAR:-default} references in text.

    Args:
        text: Raw text (typically YAML file content)
        env: Environment mapping, defaults to os.environ

    Returns:
        Text with all references substituted

    Raises:
        ConfigError: If a referenced variable is unset and has no default
    """
    source = os.environ if env is None else env

    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        if name in source:
            return source[name]
        if default is not None:
            return default
        raise ConfigError(
            field=name,
            message=f"Environment variable '{name}' is referenced but not set",
        )

    return _ENV_PATTERN.sub(_replace, text)
