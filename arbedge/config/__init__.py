"""Configuration module."""

from arbedge.config.settings import settings, Settings

__all__ = [
    "settings",
    "Settings",
]
