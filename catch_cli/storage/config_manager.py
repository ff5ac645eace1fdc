"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from catch_cli.exceptions import ConfigurationError
from catch_cli.models.config import CatchConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> CatchConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing file is not an error: the built-in defaults are used instead.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated CatchConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(f"No config file at '{self.config_file_path}', using defaults")

        # Override with CLI options
        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return CatchConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: Values to write; any key left out gets its default.
        """
        settings = settings or {}
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = CatchConfig.model_construct()
        for key in sorted(CatchConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            config["DEFAULT"][key] = self._to_ini_value(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return ""
        return str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        try:
            return {
                "default_output": section.get("default_output", "output.html"),
                "default_store": section.get("default_store", ""),
                "dialect": section.get("dialect", "auto"),
                "chunk_size": section.getint("chunk_size", 131072),
                "timeout": section.getfloat("timeout", 90.0),
                "fetch_attempts": section.getint("fetch_attempts", 1),
                "strict_decode": section.getboolean("strict_decode", False),
                "ping_count": section.getint("ping_count", 4),
                "ping_timeout": section.getfloat("ping_timeout", 2.0),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = CatchConfig.model_construct()
        needs_saving = False

        config_section = self._parser["DEFAULT"]

        for key in sorted(CatchConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini_value(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
