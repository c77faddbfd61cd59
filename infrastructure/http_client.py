"""Async HTTP client used for outbound verification calls."""

from typing import Any, Mapping, Optional

import httpx


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient with a configurable timeout.

    The pool is safe to share between concurrent coroutines. Every response
    is read in full by ``post_form`` so its connection goes back to the pool
    before the caller sees it.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def post_form(
        self, url: str, data: Mapping[str, str], **kwargs: Any
    ) -> httpx.Response:
        """POST ``data`` as application/x-www-form-urlencoded."""
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        headers.update(kwargs.pop("headers", None) or {})
        return await self._client.post(url, data=data, headers=headers, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
