"""Configuration file loader and validator.

Reads the optional INI configuration file of the deepl command-line tool into a ``Config`` object.
Values are converted according to the type of the matching ``Config`` field; keys that are not present in the
file keep their defaults.
"""

from __future__ import annotations

import ast
import configparser
import logging
import re
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Callable
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "DEFAULT_CONFIG_FILE",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "deepl.ini"

_ENV_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Loads and validates the configuration.

    Args:
        config_filename (str | None): INI file to load. If None, the default file is loaded when it exists
            and the built-in defaults are used otherwise.
        debug (bool): Command-line override for ``GENERAL.DEBUG``.

    Raises:
        ConfigFileNotFoundError: If an explicitly given configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values or types.
    """

    def __init__(self, *, config_filename: str | None = None, debug: bool = False) -> None:
        self.config = Config()
        self.config_path: Path | None = self._find_config(config_filename)

        if self.config_path is not None:
            parser: ConfigParser = ConfigParser()
            try:
                parser.read(self.config_path, encoding="utf-8")
            except (configparser.Error, UnicodeDecodeError) as err:
                msg: str = f"Failed to parse configuration file '{self.config_path}': {err}"
                raise ConfigFormatError(msg) from None
            self._convert_settings(parser)
            logger.debug("Configuration loaded from '%s'", self.config_path)

        if debug:
            self.config.GENERAL.DEBUG = True
        self._validate_settings()

    @staticmethod
    def _find_config(config_filename: str | None) -> Path | None:
        if config_filename is None:
            default_path = Path(DEFAULT_CONFIG_FILE)
            return default_path if default_path.is_file() else None

        config_path = Path(config_filename)
        if not config_path.is_file():
            msg: str = f"Configuration file '{config_filename}' not found."
            raise ConfigFileNotFoundError(msg)
        return config_path

    def _convert_settings(self, parser: ConfigParser) -> None:
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Skipping undefined section: '%s'", section.name)
                continue
            for key in fields(getattr(self.config, section.name)):
                if not parser.has_option(section.name, key.name):
                    logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                    continue
                setattr(getattr(self.config, section.name), key.name, formatter.apply_format(section, key))

        for section_name in parser.sections():
            if section_name not in {section.name for section in fields(self.config)}:
                logger.warning("Unknown section '%s' in the configuration file is ignored", section_name)

    def _validate_settings(self) -> None:
        """Check values that have a restricted form.

        Raises:
            ConfigValueError: If a value is not acceptable.
            ConfigTypeError: If a value has the wrong type.
        """
        for section_name, key_name in (("GENERAL", "LOG_LEVEL"), ("GENERAL", "LOG_FILE"), ("API", "KEY_ENV")):
            value: Any = getattr(getattr(self.config, section_name), key_name)
            if not isinstance(value, str):
                msg: str = f"Unsupported type used for '{section_name}.{key_name}': {type(value)}"
                raise ConfigTypeError(msg)

        if not _ENV_NAME_PATTERN.match(self.config.API.KEY_ENV):
            msg = f"'API.KEY_ENV' is not a valid environment variable name: '{self.config.API.KEY_ENV}'"
            raise ConfigValueError(msg)

        if self.config.GENERAL.LOG_LEVEL.upper() not in logging.getLevelNamesMapping():
            logger.warning("Unknown value '%s' is set for 'GENERAL.LOG_LEVEL'", self.config.GENERAL.LOG_LEVEL)


class _ConfigFormatter:
    """Converts INI string values to typed Python objects."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert an INI value to the type of the current ``Config`` field value.

        Booleans and numbers are parsed directly; anything else is evaluated as a Python literal,
        falling back to the raw string for unquoted text.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
        """
        formatters: dict[type, Callable[[str, str], bool | int | float]] = {
            bool: self.parser.getboolean,
            int: self.parser.getint,
            float: self.parser.getfloat,
        }

        formatter: Callable[[str, str], bool | int | float] | None = formatters.get(
            type(getattr(getattr(self.config, section.name), key.name))
        )
        if formatter:
            try:
                return formatter(section.name, key.name)
            except ValueError as err:
                msg: str = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err

        value_str: str = self.parser[section.name][key.name].strip()
        try:
            return ast.literal_eval(value_str)
        except (ValueError, SyntaxError):
            return value_str
