"""Configuration data models for the deepl command-line tool.

Each dataclass corresponds to one section of the INI configuration file; attribute names are the keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = ["Api", "Config", "General"]


@dataclass
class General:
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""


@dataclass
class Api:
    # Name of the environment variable holding the API key.
    KEY_ENV: str = "DEEPL_API_KEY"


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    API: Api = field(default_factory=Api)
