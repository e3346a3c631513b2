"""
Configuration Models

Pydantic models for type-safe configuration management with validation,
defaults, and field documentation.
"""

from functools import cached_property
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autoshadow.domains import DomainMatcher


class RedditConfig(BaseModel):
    """Reddit API credentials and the subreddit to watch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    client_id: Optional[str] = Field(
        default=None,
        description="Reddit API client ID"
    )
    client_secret: Optional[str] = Field(
        default=None,
        description="Reddit API client secret"
    )
    username: Optional[str] = Field(
        default=None,
        description="Reddit username for authenticated access"
    )
    password: Optional[str] = Field(
        default=None,
        description="Reddit password for authenticated access"
    )
    user_agent: str = Field(
        default="autoshadow/0.1 (r/rust off-topic post watcher)",
        description="User agent string for API requests"
    )
    subreddit: str = Field(
        default="rust",
        min_length=1,
        description="Subreddit to watch, without the 'r/' prefix"
    )

    @field_validator('subreddit')
    @classmethod
    def strip_subreddit_prefix(cls, v):
        """Accept 'r/rust' as well as 'rust'."""
        v = v.strip()
        if v.lower().startswith('r/'):
            v = v[2:]
        if not v:
            raise ValueError("subreddit name cannot be empty")
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


class UrlConfig(BaseModel):
    """
    Domain allow and block lists.

    Each entry is a hostname of two or three labels. A two-label entry
    ('github.com') covers every sub-domain. A malformed entry raises
    FormatError while the configuration is being loaded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow: List[str] = Field(
        default_factory=list,
        description="Domains whose links mark a post as on-topic"
    )
    block: List[str] = Field(
        default_factory=list,
        description="Domains whose links mark a post as off-topic"
    )

    @field_validator('allow', 'block')
    @classmethod
    def validate_domains(cls, v):
        """Normalize entries and reject malformed domains."""
        domains = [domain.strip().lower() for domain in v if domain.strip()]
        # FormatError is not a ValueError, so pydantic lets it propagate as-is
        DomainMatcher.build(domains)
        return domains

    @cached_property
    def allow_matcher(self) -> DomainMatcher:
        return DomainMatcher.build(self.allow)

    @cached_property
    def block_matcher(self) -> DomainMatcher:
        return DomainMatcher.build(self.block)


class YoutubeConfig(BaseModel):
    """Trusted YouTube channels for the known-channel filter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    trusted_channels: List[str] = Field(
        default_factory=list,
        description="Channel IDs (UC...) whose videos are on-topic"
    )
    resolve_channels: bool = Field(
        default=True,
        description="Fetch video pages to resolve their channel ID"
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        le=120.0,
        description="Timeout in seconds for video page requests"
    )

    @field_validator('trusted_channels')
    @classmethod
    def strip_channels(cls, v):
        return [channel.strip() for channel in v if channel.strip()]


class WatchConfig(BaseModel):
    """Polling and debounce settings for the watch loop."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    poll_interval: float = Field(
        default=60.0,
        ge=1.0,
        description="Seconds to sleep between polls"
    )
    latest_batch_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of posts fetched from the 'new' listing per poll"
    )
    debounce_margin: int = Field(
        default=100,
        ge=0,
        description="Extra debounce capacity on top of latest_batch_size"
    )

    @property
    def debounce_capacity(self) -> int:
        return self.latest_batch_size + self.debounce_margin


class StorageConfig(BaseModel):
    """Post database settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    database_path: Path = Field(
        default=Path("autoshadow.sqlite3"),
        description="SQLite database holding previously seen posts"
    )


class AppConfig(BaseModel):
    """Root application configuration model."""

    reddit: RedditConfig = Field(default_factory=RedditConfig, description="Reddit API configuration")
    url: UrlConfig = Field(default_factory=UrlConfig, description="Domain allow/block lists")
    youtube: YoutubeConfig = Field(default_factory=YoutubeConfig, description="Known channel configuration")
    watch: WatchConfig = Field(default_factory=WatchConfig, description="Watch loop configuration")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage configuration")

    # General Settings
    verbose: bool = Field(
        default=False,
        description="Enable verbose logging output"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed logging"
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )
