"""
Request factory for api_connector.

ApiConnector holds the transport, the response validator and the
registry of pending single-flight calls shared by every request it
builds.
"""

import logging
from typing import Any, Optional

from .http_primitives import Params, RequestConfig
from .registry import PendingRegistry
from .request import ApiRequest, Validator
from .transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class ApiConnector:
    """
    Factory of ApiRequest objects sharing one configuration.

    Requests built by the same connector share its pending registry,
    so ``start_single`` only cancels calls made through it.
    """

    def __init__(
        self,
        validate: Optional[Validator] = None,
        transport: Optional[Transport] = None,
        registry: Optional[PendingRegistry] = None,
        **transport_options: Any,
    ):
        """
        Initialize the connector.

        Args:
            validate: Predicate deciding whether a response is
                *successful*; None accepts every response
            transport: Transport to issue calls with; an HttpxTransport
                built from ``transport_options`` when omitted
            registry: Registry of pending calls, a new one when omitted
            **transport_options: HttpxTransport arguments (base_url,
                headers, timeout, ...)
        """
        if transport is None:
            transport = HttpxTransport(**transport_options)
        elif transport_options:
            raise ValueError("transport_options cannot be combined with an explicit transport")

        self.validate = validate
        self.transport = transport
        self.pending = registry if registry is not None else PendingRegistry()

        logger.debug(f"Connector initialized with {type(transport).__name__}")

    def get(self, url: str, params: Optional[Params] = None, **options: Any) -> ApiRequest:
        """Create a GET request."""
        return self.request(RequestConfig.create("GET", url, params=params, **options))

    def post(
        self, url: str, data: Any = None, params: Optional[Params] = None, **options: Any
    ) -> ApiRequest:
        """Create a POST request."""
        return self.request(RequestConfig.create("POST", url, params=params, data=data, **options))

    def patch(
        self, url: str, data: Any = None, params: Optional[Params] = None, **options: Any
    ) -> ApiRequest:
        """Create a PATCH request."""
        return self.request(RequestConfig.create("PATCH", url, params=params, data=data, **options))

    def put(
        self, url: str, data: Any = None, params: Optional[Params] = None, **options: Any
    ) -> ApiRequest:
        """Create a PUT request."""
        return self.request(RequestConfig.create("PUT", url, params=params, data=data, **options))

    def delete(self, url: str, params: Optional[Params] = None, **options: Any) -> ApiRequest:
        """Create a DELETE request."""
        return self.request(RequestConfig.create("DELETE", url, params=params, **options))

    def request(
        self,
        config: RequestConfig,
        validate: Optional[Validator] = None,
        transport: Optional[Transport] = None,
    ) -> ApiRequest:
        """
        Create an ApiRequest.

        Args:
            config: Configuration of the call
            validate: Validator overriding the connector's one
            transport: Transport overriding the connector's one

        Returns:
            New ApiRequest
        """
        return ApiRequest(
            transport if transport is not None else self.transport,
            self.pending,
            validate if validate is not None else self.validate,
            config,
        )

    async def aclose(self) -> None:
        """Close the connector's transport."""
        await self.transport.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
