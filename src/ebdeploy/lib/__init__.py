"""Shared library code for eb-deploy (errors, logging)."""
