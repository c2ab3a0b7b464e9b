"""
Configuration management for Backend OmniPass.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for service configuration.
"""

from backend_omnipass.config.settings import Settings, TierThresholds, get_settings  # noqa: F401

__all__ = ["Settings", "TierThresholds", "get_settings"]
