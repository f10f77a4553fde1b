"""YAML configuration loading and validation.

This module handles loading and saving page store configuration from YAML
files, and building a configuration from environment variables (optionally
read from a .env file via python-dotenv).
"""

import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from src.document_engine.errors import ConfigError
from src.document_engine.models import StoreConfig
from src.persistence.errors import PersistenceError
from src.persistence.snapshot_adapter import SUPPORTED_FORMATS


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        snapshot_path: ".page-store/db.json"
        snapshot_format: json
        lock_timeout: 30
        json_indent: 2

    Every field is optional; missing fields take the StoreConfig defaults.
    """

    KNOWN_FIELDS = {'snapshot_path', 'snapshot_format', 'lock_timeout', 'json_indent'}

    ENV_SNAPSHOT_PATH = 'PAGE_STORE_PATH'
    ENV_SNAPSHOT_FORMAT = 'PAGE_STORE_FORMAT'
    ENV_LOCK_TIMEOUT = 'PAGE_STORE_LOCK_TIMEOUT'

    @classmethod
    def load(cls, config_path: str) -> StoreConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            StoreConfig object with parsed configuration

        Raises:
            PersistenceError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError as e:
            raise PersistenceError(config_path, 'read', 'Configuration file not found') from e
        except PermissionError as e:
            raise PersistenceError(config_path, 'read', 'Permission denied') from e
        except OSError as e:
            raise PersistenceError(config_path, 'read', str(e)) from e

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {e}") from e

        # An empty file means "all defaults"
        if config_dict is None:
            return StoreConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, store_config: StoreConfig) -> None:
        """Save configuration to a YAML file.

        Raises:
            PersistenceError: If file cannot be written
        """
        config_dict: Dict[str, Any] = {
            'snapshot_path': store_config.snapshot_path,
            'lock_timeout': store_config.lock_timeout,
            'json_indent': store_config.json_indent,
        }
        # Only include the format if it was pinned explicitly
        if store_config.snapshot_format:
            config_dict['snapshot_format'] = store_config.snapshot_format

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        try:
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)
        except OSError as e:
            raise PersistenceError(config_dir, 'create_directory', str(e)) from e

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError as e:
            raise PersistenceError(config_path, 'write', 'Permission denied') from e
        except OSError as e:
            raise PersistenceError(config_path, 'write', str(e)) from e

    @classmethod
    def from_env(
        cls,
        base: Optional[StoreConfig] = None,
        dotenv_path: Optional[str] = None,
    ) -> StoreConfig:
        """Apply environment variable overrides to a configuration.

        Loads a .env file (if present) with python-dotenv first. Variables
        already set in the process environment win over the .env file.

        Environment variables:
            PAGE_STORE_PATH: Snapshot file path
            PAGE_STORE_FORMAT: Snapshot format ('json' or 'yaml')
            PAGE_STORE_LOCK_TIMEOUT: Lock timeout in seconds

        Args:
            base: Configuration to start from (defaults to StoreConfig())
            dotenv_path: Explicit .env file path (default: search upwards)

        Raises:
            ConfigError: If an override has an invalid value
        """
        load_dotenv(dotenv_path)

        config_dict: Dict[str, Any] = {}
        if base is not None:
            config_dict = {
                'snapshot_path': base.snapshot_path,
                'snapshot_format': base.snapshot_format,
                'lock_timeout': base.lock_timeout,
                'json_indent': base.json_indent,
            }

        snapshot_path = os.getenv(cls.ENV_SNAPSHOT_PATH)
        if snapshot_path:
            config_dict['snapshot_path'] = snapshot_path
        snapshot_format = os.getenv(cls.ENV_SNAPSHOT_FORMAT)
        if snapshot_format:
            config_dict['snapshot_format'] = snapshot_format
        lock_timeout = os.getenv(cls.ENV_LOCK_TIMEOUT)
        if lock_timeout:
            config_dict['lock_timeout'] = lock_timeout

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> StoreConfig:
        """Parse and validate configuration dictionary.

        Raises:
            ConfigError: If configuration is invalid
        """
        unknown_fields = set(config_dict.keys()) - cls.KNOWN_FIELDS
        if unknown_fields:
            raise ConfigError(
                f"Unknown fields: {', '.join(sorted(str(f) for f in unknown_fields))}"
            )

        defaults = StoreConfig()

        snapshot_path = config_dict.get('snapshot_path', defaults.snapshot_path)
        if not isinstance(snapshot_path, str) or not snapshot_path.strip():
            raise ConfigError(
                "Field 'snapshot_path' must be a non-empty string",
                'snapshot_path'
            )

        snapshot_format = config_dict.get('snapshot_format', defaults.snapshot_format)
        if snapshot_format is not None:
            snapshot_format = str(snapshot_format).strip().lower()
            if snapshot_format not in SUPPORTED_FORMATS:
                raise ConfigError(
                    f"Field 'snapshot_format' must be one of {', '.join(SUPPORTED_FORMATS)}, "
                    f"got '{snapshot_format}'",
                    'snapshot_format'
                )

        lock_timeout = config_dict.get('lock_timeout', defaults.lock_timeout)
        try:
            lock_timeout = float(lock_timeout)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Field 'lock_timeout' must be a number: {e}", 'lock_timeout') from e
        if lock_timeout <= 0:
            raise ConfigError(
                f"Field 'lock_timeout' must be positive, got {lock_timeout}",
                'lock_timeout'
            )

        json_indent = config_dict.get('json_indent', defaults.json_indent)
        if json_indent is not None:
            if isinstance(json_indent, bool) or not isinstance(json_indent, int) or json_indent < 0:
                raise ConfigError(
                    "Field 'json_indent' must be a non-negative integer or null",
                    'json_indent'
                )

        return StoreConfig(
            snapshot_path=snapshot_path.strip(),
            snapshot_format=snapshot_format,
            lock_timeout=lock_timeout,
            json_indent=json_indent
        )
