"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from openlens_cli.exceptions import ConfigurationError
from openlens_cli.models.config import (
    DEFAULT_DOWNLOAD_FILENAME,
    DEFAULT_POLL_INTERVAL,
    ClientConfig,
)
from openlens_cli.utils.path import get_data_dir, get_default_media_dir

log = logging.getLogger(__name__)


def default_settings() -> dict[str, Any]:
    """Values written for keys the user did not provide."""
    return {
        "service_url": "",
        "request_timeout": 30.0,
        "poll_interval": DEFAULT_POLL_INTERVAL,
        "max_poll_attempts": 0,
        "download_dir": str(get_data_dir() / "downloads"),
        "download_filename": DEFAULT_DOWNLOAD_FILENAME,
        "media_dir": str(get_default_media_dir()),
    }


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> ClientConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated ClientConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'openlens init' first."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        try:
            config_from_file = self._get_config_as_dict()
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return ClientConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save. Missing keys get defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        defaults = default_settings()
        config["DEFAULT"] = {
            key: str(settings.get(key, defaults.get(key, "")))
            for key in sorted(ClientConfig.get_ini_keys())
        }

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        defaults = default_settings()
        return {
            "service_url": section.get("service_url", ""),
            "request_timeout": section.getfloat("request_timeout", 30.0),
            "poll_interval": section.getfloat("poll_interval", DEFAULT_POLL_INTERVAL),
            "max_poll_attempts": section.getint("max_poll_attempts", 0),
            "download_dir": Path(section.get("download_dir", defaults["download_dir"])),
            "download_filename": section.get(
                "download_filename", DEFAULT_DOWNLOAD_FILENAME
            ),
            "media_dir": Path(section.get("media_dir", defaults["media_dir"])),
        }

    def get_raw_settings(self) -> dict[str, str]:
        """Returns the file's settings as plain strings, for display."""
        if not self._parser.has_option("DEFAULT", "service_url"):
            self._parser.read(self.config_file_path, encoding="utf-8")
        return dict(self._parser["DEFAULT"])

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = default_settings()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(ClientConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = str(defaults[key])
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
