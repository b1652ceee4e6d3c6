"""
Transport interface for api_connector.

This module defines the Transport interface requests use to
issue the actual HTTP call.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..exceptions import Cancelled
from ..http_primitives import RequestConfig, Response
from .cancel import CancelSource, CancelToken


class Transport(ABC):
    """
    Interface for transport implementations.

    A transport performs one HTTP call per ``issue`` and reports
    cancellation by raising the ``Cancelled`` marker; any other
    exception is treated by requests as an error.
    """

    @abstractmethod
    async def issue(self, config: RequestConfig, token: CancelToken) -> Response:
        """
        Perform an HTTP call.

        Args:
            config: The request configuration.
            token: Cancellation token scoped to this call.

        Returns:
            The response received.

        Raises:
            Cancelled: If the token was cancelled before the call settled.
            Exception: Any other failure of the call.
        """
        pass

    def create_cancellation(self) -> CancelSource:
        """Create a cancellation source for a new call."""
        return CancelSource()

    def is_cancellation(self, value: Any) -> bool:
        """Check whether a failure value is a cancellation marker."""
        return isinstance(value, Cancelled)

    async def aclose(self) -> None:
        """Release resources held by the transport."""
