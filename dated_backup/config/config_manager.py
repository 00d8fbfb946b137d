"""Configuration management for dated backups."""

import copy
import os
import yaml
from typing import Dict, List, Any, Optional
from .config_validator import ConfigValidator


DEFAULT_CONFIG = {
    'rsync': {
        'binary': 'rsync',
        'backup_options': ['-aAXHv', '--delete', '--stats'],
        'partial_options': ['-aHUXv', '--delete', '--stats'],
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


class ConfigManager:
    """Manages configuration loading and validation for dated backups."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.dated-backup/config.yaml"),
        os.path.expanduser("~/.dated-backup/config.yml"),
        "/etc/dated-backup/config.yaml",
        "/etc/dated-backup/config.yml"
    ]

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_file: Optional[str] = None
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file, or built-in defaults if there is none.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If an explicit config file cannot be found.
            ValueError: If config file is invalid.
        """
        self.config_file = self._find_config_file()
        self.config_data = {}

        if self.config_file:
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self.config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in config file {self.config_file}: {e}")
            except OSError as e:
                raise ValueError(f"Error reading config file {self.config_file}: {e}")

        # Validate configuration
        self.validator.validate(self.config_data)

        # Set defaults
        self._set_defaults()

        return self.config_data

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file, or None when no default location has one.

        Raises:
            FileNotFoundError: If the explicitly requested file is missing.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        return None

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        for section, section_defaults in DEFAULT_CONFIG.items():
            if section not in self.config_data or self.config_data[section] is None:
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = copy.deepcopy(value)

    def get_rsync_config(self) -> Dict[str, Any]:
        """Get rsync configuration.

        Returns:
            Rsync configuration dictionary.
        """
        return self.config_data.get('rsync', {})

    def get_rsync_options(self, flow: str) -> List[str]:
        """Get the rsync options of one flow ('backup' or 'partial')."""
        return list(self.get_rsync_config().get(f'{flow}_options', []))

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})
