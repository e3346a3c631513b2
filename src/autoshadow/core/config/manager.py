"""
Configuration Manager

Handles hierarchical configuration loading and validation with support for
CLI args → environment variables → config files → defaults.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from autoshadow.core.config.models import AppConfig
from autoshadow.core.exceptions import ConfigurationError, ErrorCode

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages application configuration with hierarchical loading and validation.

    Configuration sources in order of precedence:
    1. CLI arguments (highest priority)
    2. Environment variables
    3. Secrets file (``SECRETS_PATH``)
    4. Configuration file
    5. Default values (lowest priority)
    """

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        secrets_file: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file; falls back to
                ``CONFIG_PATH`` and then the default search paths
            secrets_file: Optional path to a secrets file holding Reddit
                credentials; falls back to ``SECRETS_PATH``
        """
        if config_file is None and os.environ.get('CONFIG_PATH'):
            config_file = os.environ['CONFIG_PATH']
        if secrets_file is None and os.environ.get('SECRETS_PATH'):
            secrets_file = os.environ['SECRETS_PATH']

        self.config_file = Path(config_file) if config_file else None
        self.secrets_file = Path(secrets_file) if secrets_file else None
        self._config: Optional[AppConfig] = None
        self._config_paths = self._get_default_config_paths()

    def _get_default_config_paths(self) -> List[Path]:
        """Get default configuration file search paths."""
        search_paths = [
            Path.cwd() / "autoshadow.yaml",
            Path.cwd() / "autoshadow.yml",
            Path.cwd() / ".autoshadow.yaml",
            Path.home() / ".config" / "autoshadow" / "config.yaml",
        ]

        xdg_config = os.environ.get('XDG_CONFIG_HOME')
        if xdg_config:
            search_paths.append(Path(xdg_config) / "autoshadow" / "config.yaml")

        return search_paths

    def load_config(
        self,
        cli_args: Optional[Dict[str, Any]] = None,
        env_prefix: str = "AUTOSHADOW_"
    ) -> AppConfig:
        """
        Load and validate configuration from all sources.

        Args:
            cli_args: Dictionary of CLI arguments
            env_prefix: Prefix for environment variables

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
            FormatError: If a URL allow/block entry is not a valid domain
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_config_file()
        if file_config:
            config_data.update(file_config)

        if self.secrets_file:
            secrets = self._read_file(self.secrets_file)
            config_data = self._deep_merge(config_data, secrets)

        env_config = self._load_env_config(env_prefix)
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        if cli_args:
            cli_config = self._normalize_cli_args(cli_args)
            config_data = self._deep_merge(config_data, cli_config)

        try:
            self._config = AppConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e}",
                error_code=ErrorCode.CONFIG_INVALID_VALUE,
                cause=e,
            )

        logger.debug(
            f"Loaded configuration: {len(self._config.url.allow)} allowed domains, "
            f"{len(self._config.url.block)} blocked domains, "
            f"{len(self._config.youtube.trusted_channels)} trusted channels"
        )
        return self._config

    def _load_config_file(self) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        config_file = self.config_file

        if config_file is not None:
            if not config_file.exists():
                raise ConfigurationError(
                    f"Config file not found: {config_file}",
                    error_code=ErrorCode.CONFIG_FILE_NOT_FOUND,
                    config_key="config_file",
                    config_value=str(config_file),
                )
        else:
            for path in self._config_paths:
                if path.exists() and path.is_file():
                    config_file = path
                    break

        if config_file is None:
            logger.debug("No configuration file found, using defaults")
            return None

        logger.info(f"Reading config at path {config_file}")
        return self._read_file(config_file)

    def _read_file(self, path: Path) -> Dict[str, Any]:
        """Read a YAML or JSON mapping from disk."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Config file not found: {path}",
                error_code=ErrorCode.CONFIG_FILE_NOT_FOUND,
                config_value=str(path),
                cause=e,
            )
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {path}: {e}",
                error_code=ErrorCode.CONFIG_INVALID_FORMAT,
                config_value=str(path),
                cause=e,
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping at the top level",
                error_code=ErrorCode.CONFIG_INVALID_FORMAT,
                config_value=str(path),
            )
        return data

    def _load_env_config(self, prefix: str) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        env_mappings = {
            # Reddit configuration
            f"{prefix}CLIENT_ID": ("reddit", "client_id", str),
            f"{prefix}CLIENT_SECRET": ("reddit", "client_secret", str),
            f"{prefix}USERNAME": ("reddit", "username", str),
            f"{prefix}PASSWORD": ("reddit", "password", str),
            f"{prefix}USER_AGENT": ("reddit", "user_agent", str),
            f"{prefix}SUBREDDIT": ("reddit", "subreddit", str),

            # URL policy
            f"{prefix}ALLOW_DOMAINS": ("url", "allow", self._parse_list),
            f"{prefix}BLOCK_DOMAINS": ("url", "block", self._parse_list),

            # YouTube
            f"{prefix}TRUSTED_CHANNELS": ("youtube", "trusted_channels", self._parse_list),
            f"{prefix}RESOLVE_CHANNELS": ("youtube", "resolve_channels", self._parse_bool),

            # Watch loop
            f"{prefix}POLL_INTERVAL": ("watch", "poll_interval", float),
            f"{prefix}BATCH_SIZE": ("watch", "latest_batch_size", int),

            # Storage
            f"{prefix}DATABASE": ("storage", "database_path", str),

            # General settings
            f"{prefix}VERBOSE": ("verbose", None, self._parse_bool),
            f"{prefix}DEBUG": ("debug", None, self._parse_bool),
        }

        for env_var, (section, key, parser) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            try:
                parsed_value = parser(value)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {value} ({e})",
                    config_key=env_var,
                    config_value=value,
                    cause=e,
                )
            if key is None:
                env_config[section] = parsed_value
            else:
                env_config.setdefault(section, {})[key] = parsed_value

        return env_config

    def _normalize_cli_args(self, cli_args: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize CLI arguments to configuration structure."""
        normalized: Dict[str, Any] = {}

        cli_mappings = {
            'verbose': 'verbose',
            'debug': 'debug',
            'subreddit': ('reddit', 'subreddit'),
            'client_id': ('reddit', 'client_id'),
            'client_secret': ('reddit', 'client_secret'),
            'user_agent': ('reddit', 'user_agent'),
            'interval': ('watch', 'poll_interval'),
            'limit': ('watch', 'latest_batch_size'),
            'database': ('storage', 'database_path'),
        }

        for cli_key, value in cli_args.items():
            if value is None:
                continue

            mapping = cli_mappings.get(cli_key)
            if mapping is None:
                continue
            if isinstance(mapping, tuple):
                section, key = mapping
                normalized.setdefault(section, {})[key] = value
            else:
                normalized[mapping] = value

        return normalized

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _parse_bool(value: Union[str, bool]) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        return value.lower() in {'true', '1', 'yes', 'on', 'enabled'}

    @staticmethod
    def _parse_list(value: Union[str, List[str]]) -> List[str]:
        """Parse a comma separated list."""
        if isinstance(value, list):
            return value
        return [item.strip() for item in value.split(',') if item.strip()]

    def validate_config(self, config: Optional[AppConfig] = None) -> List[str]:
        """
        Validate configuration and return a list of warnings.

        Args:
            config: Configuration to validate (uses loaded config if None)

        Returns:
            List of validation warnings
        """
        if config is None:
            config = self._config

        if config is None:
            return ["No configuration loaded"]

        warnings = []

        if not config.reddit.has_credentials:
            warnings.append("Reddit client_id/client_secret not provided; watch will fail to authenticate")

        if not config.url.allow and not config.url.block:
            warnings.append("No URL allow or block domains configured")

        if config.youtube.resolve_channels and not config.youtube.trusted_channels:
            warnings.append("Channel resolution enabled but no trusted channels configured")

        overlap = set(config.url.allow) & set(config.url.block)
        if overlap:
            warnings.append(f"Domains both allowed and blocked (allow wins): {', '.join(sorted(overlap))}")

        return warnings

    @property
    def config(self) -> Optional[AppConfig]:
        """Get the loaded configuration."""
        return self._config
