"""DeepL API client.

This package contains the ``DeepL`` client class and the exceptions it raises.
"""

from core.client import DeepL
from core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DeepLError,
    DeserializationError,
    NotFoundError,
    ServerError,
    TransportError,
)

__all__: list[str] = [
    "AuthorizationError",
    "ConfigurationError",
    "DeepL",
    "DeepLError",
    "DeserializationError",
    "NotFoundError",
    "ServerError",
    "TransportError",
]
