"""
Transport components for api_connector.

This module provides the transport interface requests issue their
calls through, the cooperative cancellation primitives, and the
httpx and in-memory implementations.
"""

from .base import Transport
from .cancel import CancelSource, CancelToken
from .httpx_transport import HttpxTransport, default_validate_status
from .mock import MockRoute, MockTransport

__all__ = [
    "Transport",
    "CancelSource",
    "CancelToken",
    "HttpxTransport",
    "default_validate_status",
    "MockRoute",
    "MockTransport",
]
