"""Exceptions raised by the DeepL API client.

Every error the client raises derives from DeepLError, so callers that do not care about the kind of failure
can catch a single class.
"""

from __future__ import annotations

__all__: list[str] = [
    "AuthorizationError",
    "ConfigurationError",
    "DeepLError",
    "DeserializationError",
    "NotFoundError",
    "ServerError",
    "TransportError",
]


class DeepLError(Exception):
    """Base class for all errors of the DeepL client."""


class ConfigurationError(DeepLError):
    """The client cannot be set up, e.g. because no API key is available."""


class AuthorizationError(DeepLError):
    """The API key was refused by the DeepL server (HTTP 401 or 403)."""

    def __init__(self) -> None:
        super().__init__("Authorization failed, is your API key correct?")


class NotFoundError(DeepLError):
    """The requested resource was not found (HTTP 404)."""

    def __init__(self) -> None:
        super().__init__("The requested resource was not found.")


class ServerError(DeepLError):
    """The server reported an error while processing the request.

    Attributes:
        message (str): The message reported by the server, or the HTTP status line if none could be decoded.
    """

    def __init__(self, message: str) -> None:
        self.message: str = message
        super().__init__(f"An error occurred while communicating with the DeepL server: '{message}'.")


class DeserializationError(DeepLError):
    """The response was successful but its body did not have the expected shape."""

    def __init__(self) -> None:
        super().__init__("An error occurred while deserializing the response data.")


class TransportError(DeepLError):
    """The request could not be completed (DNS, connection, TLS or timeout failure)."""
