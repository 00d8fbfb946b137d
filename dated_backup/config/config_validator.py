"""Configuration validation for dated backups."""

from typing import Dict, List, Any


class ConfigValidator:
    """Validates dated-backup configuration."""

    KNOWN_SECTIONS = ['rsync', 'logging']
    RSYNC_OPTION_KEYS = ['backup_options', 'partial_options']
    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
        """
        self._validate_structure(config)

        if config.get('rsync') is not None:
            self._validate_rsync_config(config['rsync'])
        if config.get('logging') is not None:
            self._validate_logging_config(config['logging'])

    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Validate basic configuration structure.

        Args:
            config: Configuration dictionary.

        Raises:
            ValueError: If the configuration is not a mapping or has unknown sections.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        unknown_sections = [section for section in config if section not in self.KNOWN_SECTIONS]
        if unknown_sections:
            raise ValueError(f"Unknown configuration sections: {unknown_sections}")

        for section, value in config.items():
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")

    def _validate_rsync_config(self, rsync_config: Dict[str, Any]) -> None:
        """Validate rsync configuration.

        Args:
            rsync_config: Rsync configuration dictionary.

        Raises:
            ValueError: If rsync configuration is invalid.
        """
        if 'binary' in rsync_config:
            binary = rsync_config['binary']
            if not isinstance(binary, str) or not binary:
                raise ValueError(f"rsync binary must be a non-empty string: {binary!r}")

        for key in self.RSYNC_OPTION_KEYS:
            if key not in rsync_config:
                continue
            options = rsync_config[key]
            self._validate_options(key, options)

    def _validate_options(self, key: str, options: List[Any]) -> None:
        if not isinstance(options, list) or not all(isinstance(option, str) for option in options):
            raise ValueError(f"rsync {key} must be a list of strings")

        # Destinations must be true mirrors, not additive merges
        if '--delete' not in options:
            raise ValueError(f"rsync {key} must include --delete")

        if '--' in options:
            raise ValueError(f"rsync {key} must not include '--'")

    def _validate_logging_config(self, logging_config: Dict[str, Any]) -> None:
        """Validate logging configuration."""
        level = logging_config.get('level', 'INFO')
        if not isinstance(level, str) or level.upper() not in self.LOG_LEVELS:
            raise ValueError(f"Invalid log level: {level!r}")

        log_file = logging_config.get('file')
        if log_file is not None and not isinstance(log_file, str):
            raise ValueError(f"Log file must be a string: {log_file!r}")
