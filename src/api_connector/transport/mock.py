"""
Mock transport implementation for testing.

This module provides an in-memory Transport that answers from a
route table, so requests can be tested without network I/O.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..http_primitives import RequestConfig, Response
from .base import Transport
from .cancel import CancelToken


@dataclass
class MockRoute:
    """Scripted outcome of calls to one method and URL."""
    status: int = 200
    content: Any = b""
    headers: Dict[str, str] = field(default_factory=dict)
    delay: float = 0.0
    error: Optional[BaseException] = None


class MockTransport(Transport):
    """
    Mock transport for testing.

    Calls are answered by the route registered for their method
    and URL, falling back to ``default``. Delays are interrupted by
    the cancel token, exactly like a real transport aborting a call.
    """

    def __init__(self, default: Optional[MockRoute] = None):
        """
        Initialize the mock transport.

        Args:
            default: Route used for calls without a registered route.
        """
        self._routes: Dict[Tuple[str, str], MockRoute] = {}
        self._default = default or MockRoute()
        self._calls: List[RequestConfig] = []

    def add_route(
        self,
        method: str,
        url: str,
        status: int = 200,
        content: Any = b"",
        headers: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
        error: Optional[BaseException] = None,
    ) -> MockRoute:
        """
        Register the outcome of calls to ``method`` and ``url``.

        Args:
            method: HTTP method
            url: Request URL, matched exactly
            status: Status code of the response
            content: Response body
            headers: Response headers
            delay: Seconds to wait before answering
            error: Exception raised instead of answering

        Returns:
            The registered route
        """
        route = MockRoute(
            status=status,
            content=content,
            headers=dict(headers) if headers else {},
            delay=delay,
            error=error,
        )
        self._routes[(method.upper(), url)] = route
        return route

    async def issue(self, config: RequestConfig, token: CancelToken) -> Response:
        self._calls.append(config)
        token.raise_if_cancelled()

        route = self._routes.get((config.method, config.url), self._default)

        if route.delay > 0:
            try:
                await asyncio.wait_for(token.wait(), route.delay)
            except asyncio.TimeoutError:
                pass
        else:
            # still yield so a racing cancel can land first
            await asyncio.sleep(0)
        token.raise_if_cancelled()

        if route.error is not None:
            raise route.error

        return Response.create(
            status=route.status,
            headers=route.headers,
            content=route.content,
            config=config,
        )

    @property
    def calls(self) -> List[RequestConfig]:
        """Configurations of every issued call, in order."""
        return list(self._calls)

    def reset(self) -> None:
        """Forget all routes and recorded calls."""
        self._routes.clear()
        self._calls.clear()
