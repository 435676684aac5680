"""Pytest configuration and shared fixtures for eb-deploy tests."""

import os
from collections.abc import Generator
from typing import Any

import pytest


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[dict[str, str], None, None]:
    """Provide an environment without eb-deploy related variables.

    Yields:
        Dictionary of original environment variables

    Cleanup:
        monkeypatch restores removed variables after the test
    """
    original_env = os.environ.copy()
    for name in (
        "AWS_DEFAULT_REGION",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "ELASTIC_BEANSTALK_LABEL",
        "ELASTIC_BEANSTALK_DESCRIPTION",
        "ELASTIC_BEANSTALK_ENVIRONMENT",
        "GIT_SHA",
    ):
        monkeypatch.delenv(name, raising=False)
    yield original_env


def pytest_configure(config: Any) -> None:
    """Configure pytest with marker options."""
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests",
    )
