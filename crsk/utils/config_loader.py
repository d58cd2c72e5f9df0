#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: CRS ToolKit (CRSK)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

"""
Configuration Management for the CRS ToolKit.

This module provides a singleton configuration manager (`Config`) that loads,
parses, and provides access to settings from a central `config.toml` file.
It ensures that configuration values are loaded only once and are available
throughout the application.

Classes:
    Config: A singleton class for managing application-wide configuration.
"""
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.toml"

class Config:
    """Singleton configuration manager"""
    _instance = None
    _config: Dict[str, Any] = {}
    _path: Optional[Path] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_config(DEFAULT_CONFIG_PATH)
        return cls._instance

    def _load_config(self, config_path: Path):
        """Load configuration from a TOML file, layered over the defaults."""
        self._config = self._default_config()
        self._path = config_path
        if not config_path.exists():
            logger.debug(f"No configuration file at {config_path}; using defaults.")
            return
        try:
            with open(config_path, "rb") as f:
                loaded = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not load {config_path}: {e}")
            return
        for section, values in loaded.items():
            if isinstance(values, dict):
                self._config.setdefault(section, {}).update(values)
            else:
                self._config[section] = values

    def _default_config(self) -> Dict[str, Any]:
        """Default configuration if config.toml doesn't exist"""
        return {
            "paths": {
                "baseline_db": "~/.crsk/srs.db",
                "overlay_db": "~/.crsk/user.db",
            },
            "catalog": {
                "user_srsid_threshold": 100000,
                "baseline_epsg_codes": [4326, 4269, 4267, 4258, 3857, 27700, 32633],
            },
            "validation": {
                "default_crs": "EPSG:4326",
            },
            "logging": {
                "level": "INFO",
                "file": "",
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., "paths.overlay_db")
            default: Default value if key is not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get("catalog.user_srsid_threshold")
            100000
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section

        Args:
            section: Section name (e.g., "paths", "catalog")

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def get_path(self, key: str) -> Optional[Path]:
        """Get a configured filesystem path with '~' expanded, or None if unset."""
        value = self.get(key)
        if not value:
            return None
        return Path(value).expanduser()

    def set(self, key: str, value: Any):
        """Set configuration value using dot notation

        Args:
            key: Configuration key in dot notation
            value: Value to set

        Note:
            This only modifies the in-memory configuration.
            Changes are not persisted to config.toml.
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def load_file(self, config_path: Path):
        """Replace the active configuration with the contents of another TOML file."""
        self._load_config(Path(config_path))

    def reload(self):
        """Reload configuration from the last loaded file"""
        self._load_config(self._path or DEFAULT_CONFIG_PATH)

# Singleton instance
config = Config()
