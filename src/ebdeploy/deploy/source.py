"""Source control metadata and artifact archiving.

The default implementation shells out to git, the same way image tags are
derived from the current checkout.
"""

from __future__ import annotations

import subprocess  # nosec B404
from abc import ABC, abstractmethod
from pathlib import Path

from ebdeploy.lib.errors import SourceControlError
from ebdeploy.lib.logging_config import get_logger

logger = get_logger(__name__)


class SourceInfo(ABC):
    """Provides revision metadata and the deployable archive."""

    @abstractmethod
    def current_revision(self) -> str:
        """Return the short identifier of the checked out revision."""

    @abstractmethod
    def commit_message(self, revision: str) -> str:
        """Return the commit message of a revision."""

    @abstractmethod
    def archive(self, destination: Path) -> Path:
        """Write a zip archive of the source tree and return its path."""

    @abstractmethod
    def cleanup(self) -> None:
        """Remove files produced while deploying."""


class GitSourceInfo(SourceInfo):
    """SourceInfo backed by the git repository in a working directory.

    Example:
        >>> source = GitSourceInfo(revision="1a2b3c4")
        >>> source.current_revision()
        '1a2b3c4'
    """

    def __init__(self, cwd: Path | None = None, revision: str | None = None) -> None:
        """Initialize git source info.

        Args:
            cwd: Repository directory (defaults to the process working directory)
            revision: Revision override (e.g. from GIT_SHA), skips git rev-parse
        """
        self._cwd = cwd
        self._revision = revision

    def _git(self, *args: str) -> str:
        command = ["git", *args]
        try:
            result = subprocess.run(  # noqa: S603  # nosec B603 B607
                command,
                cwd=self._cwd,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise SourceControlError(" ".join(command), str(e)) from e

        if result.returncode != 0:
            raise SourceControlError(
                " ".join(command),
                result.stderr.strip() or "not a git repository",
            )
        return result.stdout.strip()

    def current_revision(self) -> str:
        """Return the short SHA of HEAD."""
        if self._revision is None:
            self._revision = self._git("rev-parse", "--short", "HEAD")
        return self._revision

    def commit_message(self, revision: str) -> str:
        """Return the full commit message of a revision."""
        return self._git("log", revision, "-n", "1", "--pretty=%B")

    def archive(self, destination: Path) -> Path:
        """Create a zip archive of HEAD."""
        if not destination.is_absolute() and self._cwd is not None:
            destination = self._cwd / destination
        destination = destination.resolve()
        logger.info(f"Creating archive {destination}")
        self._git("archive", "-o", str(destination), "--format=zip", "HEAD")
        return destination

    def cleanup(self) -> None:
        """Remove untracked files and directories, including the archive."""
        logger.info("Cleaning up working tree")
        self._git("clean", "-fd")
