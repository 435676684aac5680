"""Configuration loading and defaults for eb-deploy.

Main components:
- ConfigLoader: merge CLI options, environment variables and .ebdeploy.yml
- Environment variable substitution (${VAR_NAME} pattern) in config files
- Default settings (region, poll interval, description limit)
"""
