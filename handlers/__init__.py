"""HTTP transport for the DeepL API client."""

from handlers.async_comm import AsyncCommError, AsyncCommTimeoutError, AsyncHttp, HttpResponse

__all__: list[str] = ["AsyncCommError", "AsyncCommTimeoutError", "AsyncHttp", "HttpResponse"]
