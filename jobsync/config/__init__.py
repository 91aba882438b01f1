"""
JobSync Configuration Module

This module handles configuration loading, validation and normalization for
the synchronizer. It supports YAML-based configuration with environment
variable and command-line overrides.

Author: JobSync Project
License: MIT
"""

from .schema import Config, SyncConfig, LoggingConfig, ComparatorKind
from .config_loader import ConfigLoader, load_config

__all__ = ['Config', 'SyncConfig', 'LoggingConfig', 'ComparatorKind', 'ConfigLoader', 'load_config']
