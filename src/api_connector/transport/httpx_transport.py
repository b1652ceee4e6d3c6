"""
httpx based transport for api_connector.

This module implements the Transport interface on top of
``httpx.AsyncClient``, racing every call against its cancel token.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from ..exceptions import StatusError, TransportError
from ..http_primitives import RequestConfig, Response
from .base import Transport
from .cancel import CancelToken

logger = logging.getLogger(__name__)

StatusValidator = Callable[[int], bool]


def default_validate_status(status: int) -> bool:
    """Accept 2xx statuses only."""
    return 200 <= status < 300


class HttpxTransport(Transport):
    """
    Transport backed by ``httpx.AsyncClient``.

    Statuses rejected by ``validate_status`` are raised as
    ``StatusError`` so they reach the request's error handlers;
    pass ``validate_status=None`` to resolve with every response.
    """

    # Default configuration
    DEFAULT_TIMEOUT = 30.0  # 30 seconds

    def __init__(
        self,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        validate_status: Optional[StatusValidator] = default_validate_status,
        client: Optional[httpx.AsyncClient] = None,
        **client_options: Any,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Base URL relative request URLs are joined to
            headers: Headers sent with every request
            timeout: Default timeout in seconds, None to disable
            validate_status: Predicate deciding which statuses resolve
            client: Existing client to use instead of creating one
            **client_options: Extra ``httpx.AsyncClient`` arguments
        """
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=timeout,
                **client_options,
            )
            self._owns_client = True
        else:
            self._owns_client = False

        self._client = client
        self._validate_status = validate_status

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def issue(self, config: RequestConfig, token: CancelToken) -> Response:
        token.raise_if_cancelled()

        start_time = time.time()
        call = asyncio.ensure_future(self._send(config))
        cancelled = asyncio.ensure_future(token.wait())

        try:
            await asyncio.wait({call, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            call.cancel()
            cancelled.cancel()
            raise

        if not call.done():
            call.cancel()
            try:
                await call
            except (asyncio.CancelledError, httpx.HTTPError):
                pass
            logger.debug(f"{config.method} {config.url} aborted by cancel token")
            raise await cancelled

        cancelled.cancel()
        try:
            raw = call.result()
        except httpx.HTTPError as e:
            logger.debug(f"{config.method} {config.url} failed: {e}")
            raise TransportError(str(e) or type(e).__name__, cause=e) from e

        response = Response.create(
            status=raw.status_code,
            headers=dict(raw.headers),
            content=raw.content,
            config=config,
            raw=raw,
        )

        duration = time.time() - start_time
        logger.debug(f"{config.method} {config.url} -> {response.status} ({duration:.3f}s)")

        if self._validate_status is not None and not self._validate_status(response.status):
            raise StatusError(response)

        return response

    async def _send(self, config: RequestConfig) -> httpx.Response:
        kwargs: Dict[str, Any] = dict(config.options)
        if config.params:
            kwargs["params"] = config.params
        if config.headers:
            kwargs["headers"] = config.headers
        if config.timeout is not None:
            kwargs["timeout"] = config.timeout

        data = config.data
        if isinstance(data, (bytes, str)):
            kwargs["content"] = data
        elif data is not None:
            kwargs["json"] = data

        return await self._client.request(config.method, config.url, **kwargs)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
