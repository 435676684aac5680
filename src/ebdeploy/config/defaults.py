"""Default settings for eb-deploy."""

DEFAULT_REGION = "eu-central-1"

# Readiness polling
POLL_INTERVAL_SECONDS = 5.0
TERMINAL_STATUS = "Ready"

# Elastic Beanstalk rejects longer version descriptions
DESCRIPTION_MAX_LENGTH = 200

ARCHIVE_EXTENSION = ".zip"

# Project configuration files looked up in the working directory, in order
DEFAULT_CONFIG_FILES: tuple[str, ...] = (".ebdeploy.yml", ".ebdeploy.yaml")

# Environment variable fallbacks keyed by setting name
ENV_VAR_MAP: dict[str, str] = {
    "region": "AWS_DEFAULT_REGION",
    "access_key_id": "AWS_ACCESS_KEY_ID",
    "secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "session_token": "AWS_SESSION_TOKEN",
    "version_label": "ELASTIC_BEANSTALK_LABEL",
    "version_description": "ELASTIC_BEANSTALK_DESCRIPTION",
    "environment_name": "ELASTIC_BEANSTALK_ENVIRONMENT",
    "revision": "GIT_SHA",
}
