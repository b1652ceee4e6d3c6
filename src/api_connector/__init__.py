"""
api_connector - chainable, cancellable HTTP requests

Wraps single HTTP calls with ordered event handlers, outcome
classification (ok, fail, cancel, error), status dispatch and
single-flight cancellation of superseded calls.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .connector import ApiConnector
from .events import Event, Status
from .exceptions import (
    ApiConnectorError,
    Cancelled,
    RequestCancelled,
    RequestErrored,
    RequestFailed,
    RequestRejected,
    StatusError,
    TransportError,
)
from .hashing import hash_code
from .http_primitives import RequestConfig, Response
from .pipe import Pipe
from .registry import PendingRegistry
from .request import ApiRequest, RequestHandle, RequestState
from .transport import (
    CancelSource,
    CancelToken,
    HttpxTransport,
    MockTransport,
    Transport,
)

__all__ = [
    "ApiConnector",
    "ApiRequest",
    "RequestHandle",
    "RequestState",
    "Event",
    "Status",
    "ApiConnectorError",
    "Cancelled",
    "RequestCancelled",
    "RequestErrored",
    "RequestFailed",
    "RequestRejected",
    "StatusError",
    "TransportError",
    "hash_code",
    "RequestConfig",
    "Response",
    "Pipe",
    "PendingRegistry",
    "CancelSource",
    "CancelToken",
    "HttpxTransport",
    "MockTransport",
    "Transport",
]
