"""eb-deploy CLI commands."""
