"""
Configuration for the Genesis client.

Loads settings from environment variables and an optional .env file at the
project root. get_settings() is the single source of truth.
"""

from genesis_client.config.settings import ClientSettings, get_settings  # noqa: F401

__all__ = ["ClientSettings", "get_settings"]
