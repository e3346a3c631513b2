"""
Configuration Management Package

Provides Pydantic-based configuration models and management for autoshadow.
"""

from autoshadow.core.config.models import (
    AppConfig,
    RedditConfig,
    StorageConfig,
    UrlConfig,
    WatchConfig,
    YoutubeConfig,
)
from autoshadow.core.config.manager import ConfigManager

__all__ = [
    "AppConfig",
    "RedditConfig",
    "UrlConfig",
    "YoutubeConfig",
    "WatchConfig",
    "StorageConfig",
    "ConfigManager",
]
