"""
Configuration Loader

Handles loading and merging configuration from an optional YAML file,
environment variables and explicit overrides (command-line arguments).

Author: JobSync Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "JOBSYNC_SOURCE_PATH": ("sync", "source_path"),
    "JOBSYNC_REPLICA_PATH": ("sync", "replica_path"),
    "JOBSYNC_INTERVAL": ("sync", "interval"),
    "JOBSYNC_FRAGILE": ("sync", "fragile"),
    "JOBSYNC_COMPARATOR": ("sync", "comparator"),
    "JOBSYNC_MAX_WORKERS": ("sync", "max_workers"),
    "JOBSYNC_LOG_FILE": ("logging", "log_file_path"),
    "JOBSYNC_VERBOSE": ("logging", "verbose"),
}


class ConfigLoader:
    """
    Configuration loader.

    Loads configuration from a YAML file, merges environment variables
    and explicit overrides, and validates the result.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to a YAML configuration file. If None, uses
                JOBSYNC_CONFIG when set; otherwise no file is read.
        """
        self.config_path = config_path or os.getenv("JOBSYNC_CONFIG")
        self._config: Optional[Config] = None

        # Load environment variables from .env if present
        load_dotenv()

    def load(self, overrides: Optional[Dict[str, Dict[str, Any]]] = None) -> Config:
        """
        Load and validate configuration.

        Args:
            overrides: Section -> {key: value} mapping applied last.
                None values are ignored.

        Returns:
            Validated Config object

        Raises:
            FileNotFoundError: If an explicit config file doesn't exist
            ValueError: If YAML parsing or validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)
        config_data = self._merge_overrides(config_data, overrides or {})

        self._config = Config(**config_data)
        logger.debug(f"Configuration loaded (source={self._config.sync.source_path})")
        return self._config

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data
        """
        if not self.config_path:
            return {}

        config_file = Path(self.config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"YAML config must be a mapping: {self.config_path}")
        return data

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Environment variables override config file values.

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None or value == "":
                continue
            if key == "fragile":
                value = value.strip().lower() in ("1", "true", "yes", "on")
            config_data.setdefault(section, {})[key] = value
        return config_data

    def _merge_overrides(
        self,
        config_data: Dict[str, Any],
        overrides: Dict[str, Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Apply explicit overrides, skipping unset (None) values."""
        for section, values in overrides.items():
            for key, value in values.items():
                if value is not None:
                    config_data.setdefault(section, {})[key] = value
        return config_data

    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None
) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file
        overrides: Optional explicit overrides

    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load(overrides)
