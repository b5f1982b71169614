"""HTTP plugin.

Exposes simple HTTP verbs as capabilities so plans can fetch or push data.
Each function returns the response body as text. Non-2xx responses raise
``httpx.HTTPStatusError``, which fails the plan step.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import httpx

from ..capabilities.native import native_function

logger = logging.getLogger(__name__)


class HttpPlugin:
    """Issue HTTP requests with ``httpx``.

    A shared ``httpx.AsyncClient`` can be injected (tests use
    ``httpx.MockTransport``). Without one, a short-lived client is created per
    request.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, *, timeout: float = 30.0) -> None:
        self._client = client
        self._timeout = timeout

    async def _send(self, method: str, uri: str, body: Optional[str] = None) -> str:
        logger.debug(f"HttpPlugin: {method} {uri}")
        content = body.encode("utf-8") if body is not None else None
        if self._client is not None:
            resp = await self._client.request(method, uri, content=content)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(method, uri, content=content)
        resp.raise_for_status()
        return resp.text

    @native_function("Send an HTTP GET request and return the response body")
    async def get(self, uri: Annotated[str, "The URI of the request"]) -> str:
        return await self._send("GET", uri)

    @native_function("Send an HTTP POST request with a body and return the response body")
    async def post(
        self,
        uri: Annotated[str, "The URI of the request"],
        body: Annotated[str, "The body of the request"] = "",
    ) -> str:
        return await self._send("POST", uri, body)

    @native_function("Send an HTTP PUT request with a body and return the response body")
    async def put(
        self,
        uri: Annotated[str, "The URI of the request"],
        body: Annotated[str, "The body of the request"] = "",
    ) -> str:
        return await self._send("PUT", uri, body)

    @native_function("Send an HTTP DELETE request and return the response body")
    async def delete(self, uri: Annotated[str, "The URI of the request"]) -> str:
        return await self._send("DELETE", uri)
