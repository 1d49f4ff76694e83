"""Asynchronous HTTP transport built on aiohttp.

``AsyncHttp`` performs exactly one request per call and hands back the raw response (status, reason, body) without
judging the status code; interpreting it is the job of the API client. Failures to complete the exchange at all
(timeouts, DNS, refused connections, TLS problems, dropped connections) are raised as ``AsyncCommError``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, Self, TypeAlias

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence


__all__: list[str] = ["AsyncCommError", "AsyncCommTimeoutError", "AsyncHttp", "HTTPMethod", "HttpResponse"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

Params: TypeAlias = "Sequence[tuple[str, str]]"


@dataclass(frozen=True)
class HttpResponse:
    """Raw HTTP response.

    Attributes:
        status (int): HTTP status code.
        reason (str): HTTP reason phrase, e.g. 'Not Found'.
        body (bytes): Undecoded response body.
        content_type (str): Media type from the Content-Type header, without parameters.
    """

    status: int
    reason: str = ""
    body: bytes = b""
    content_type: str = field(default="application/json")

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300  # noqa: PLR2004

    @property
    def status_line(self) -> str:
        return f"{self.status} {self.reason}".strip()

    def json(self) -> Any:
        """Decode the body as UTF-8 JSON.

        Raises:
            ValueError: If the body is not valid UTF-8 or not valid JSON.
        """
        return json.loads(self.body.decode("utf-8"))


class AsyncHttp:
    """Asynchronous HTTP client holding one aiohttp session.

    Use as an async context manager; the session is opened on entry and closed on exit::

        async with AsyncHttp(headers={"Authorization": "..."}) as http:
            response = await http.request("GET", url, query=[("type", "source")])
    """

    def __init__(self, *, headers: dict[str, str] | None = None, total_timeout: float | None = None) -> None:
        """Initialize the client. No session is created until the context is entered.

        Args:
            headers (dict[str, str] | None): Headers sent with every request of this session.
            total_timeout (float | None): Total timeout per request in seconds.
                None keeps aiohttp's default; 0 or a negative value disables the timeout.
        """
        self.__session: ClientSession | None = None
        self._headers: dict[str, str] = dict(headers or {})
        self._total_timeout: float | None = total_timeout

    async def __aenter__(self) -> Self:
        self.initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    def initialize_session(self) -> None:
        """Open the aiohttp session if it is not open yet. Must be called from a running event loop."""
        if self.__session is None or self.__session.closed:
            timeout: aiohttp.ClientTimeout | None = None
            if self._total_timeout is not None:
                timeout = aiohttp.ClientTimeout(total=self._total_timeout if self._total_timeout > 0 else None)
            if timeout is None:
                self.__session = ClientSession(headers=self._headers)
            else:
                self.__session = ClientSession(headers=self._headers, timeout=timeout)
            logger.debug("%s session initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        if self.__session is None or self.__session.closed:
            msg = "Session is not initialized or has been closed"
            raise RuntimeError(msg)
        return self.__session

    async def close(self) -> None:
        if self.__session and not self.__session.closed:
            await self.__session.close()
            logger.debug("%s session closed", self.__class__.__name__)

    async def request(
        self,
        method: HTTPMethod,
        url: str,
        *,
        query: Params | None = None,
        form: Params | None = None,
    ) -> HttpResponse:
        """Perform one HTTP request.

        Args:
            method (HTTPMethod): HTTP method.
            url (str): Absolute URL.
            query (Params | None): Query string parameters. Repeated keys are kept in order.
            form (Params | None): Parameters sent as an 'application/x-www-form-urlencoded' body.

        Returns:
            HttpResponse: The response, whatever its status code.

        Raises:
            AsyncCommTimeoutError: If the server does not answer in time.
            AsyncCommError: If the request cannot be completed.
        """
        kwargs: dict[str, Any] = {}
        if query is not None:
            kwargs["params"] = list(query)
        if form is not None:
            kwargs["data"] = aiohttp.FormData(list(form))

        try:
            async with self.session.request(method, url, **kwargs) as resp:
                body: bytes = await resp.read()
                response = HttpResponse(
                    status=resp.status,
                    reason=resp.reason or "",
                    body=body,
                    content_type=resp.content_type,
                )
        except TimeoutError as err:
            logger.debug(err)
            msg: str = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = f"Unable to connect to the server: {err}"
            raise AsyncCommError(msg) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = f"The request could not be completed: {err}"
            raise AsyncCommError(msg) from err

        logger.debug("[%s] %s -> %s (%d bytes)", method, url, response.status_line, len(response.body))
        return response


class AsyncCommError(Exception):
    """The HTTP exchange could not be completed."""


class AsyncCommTimeoutError(AsyncCommError):
    """The server did not answer within the timeout."""
