"""Configuration management for prq."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib

import pytz

from .rich_logger import setup_logging

logger = logging.getLogger(__name__)

# Environment variables folded into the configuration after loading
ENV_REPO_OVERRIDE = "GITHUB_REPO"
ENV_DEBUG = "PRQ_DEBUG"

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ConfigManager:
    """Manage configuration for prq."""

    DEFAULT_CONFIG = {
        "debug": False,
        "github": {
            "host": "github.com",
            "api_url": "https://api.github.com/",
            "timeout": 30,
            "repo": "",
        },
        "logging": {
            "level": "WARNING",
            "console_output": True,
            "file_output": False,
            "log_file": "",
            "timezone": "UTC",
        },
    }

    def __init__(self, config_path: Optional[str] = None, environ: Optional[dict[str, str]] = None):
        """
        Initialize ConfigManager.

        Args:
            config_path: Path to config file
            environ: Environment mapping (defaults to os.environ)
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.config_path = self._find_config_file(config_path)

        if self.config_path and self.config_path.exists():
            self._load_config()

        self._apply_environment(os.environ if environ is None else environ)

    def _find_config_file(self, config_path: Optional[str] = None) -> Optional[Path]:
        """
        Find configuration file.

        Args:
            config_path: Explicit config path

        Returns:
            Path object or None
        """
        if config_path:
            return Path(config_path)

        locations = [
            Path(".prq.toml"),  # Project-specific
            Path.home() / ".config" / "prq" / "config.toml",  # User config
        ]

        for location in locations:
            if location.exists():
                return location

        return None

    def _load_config(self) -> None:
        """Load configuration from file."""
        try:
            with open(self.config_path, "rb") as f:
                loaded_config = tomllib.load(f)

            self._merge_config(self.config, loaded_config)
        except (FileNotFoundError, PermissionError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")

    def _merge_config(self, base: dict[str, Any], update: dict[str, Any]) -> None:
        """
        Recursively merge configuration dictionaries.

        Args:
            base: Base configuration dictionary (modified in place)
            update: Update configuration dictionary (values to merge in)
        """
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _apply_environment(self, environ: dict[str, str]) -> None:
        """Fold the repository override and debug flag in from the environment."""
        if repo := environ.get(ENV_REPO_OVERRIDE):
            self.set("github.repo", repo)

        debug = environ.get(ENV_DEBUG, "").strip()
        if debug and debug != "0":
            self.set("debug", True)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key (dot-separated)
            default: Default value

        Returns:
            Configuration value
        """
        value = self.config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key (dot-separated)
            value: Value to set
        """
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def has(self, key: str) -> bool:
        """Check whether a dot-separated key exists."""
        value = self.config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return False

        return True

    @property
    def debug(self) -> bool:
        return bool(self.get("debug", False))

    @property
    def repo_override(self) -> Optional[str]:
        return self.get("github.repo") or None

    def get_logging_config(self) -> dict[str, Any]:
        """
        Get logging configuration.

        Returns:
            Dictionary containing logging configuration
        """
        return self.get("logging", self.DEFAULT_CONFIG["logging"])

    def setup_logging(self) -> None:
        """
        Setup application logging using the configured settings.

        Debug mode forces the DEBUG level regardless of the configured one.
        """
        log_config = self.get_logging_config()

        level = LEVEL_MAP.get(str(log_config.get("level", "WARNING")).upper(), logging.WARNING)
        if self.debug:
            level = logging.DEBUG

        timezone_str = log_config.get("timezone", "UTC")
        try:
            timezone_obj = pytz.timezone(timezone_str)
        except pytz.exceptions.UnknownTimeZoneError:
            timezone_obj = pytz.utc

        setup_logging(
            level=level,
            log_file=log_config.get("log_file") or None,
            console_output=log_config.get("console_output", True),
            file_output=log_config.get("file_output", False),
            timezone=timezone_obj,
        )
