"""
Configuration management for the Insight client.

Loads settings from environment variables and an optional .env file.
Explicit arguments passed to InsightClient.connect() win over the environment.
"""

from insight_client.config.settings import ClientSettings, get_settings  # noqa: F401

__all__ = ["ClientSettings", "get_settings"]
