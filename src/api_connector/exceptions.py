"""
Custom exceptions for api_connector.

This module defines the exception hierarchy used by transports and
by the request state machine to report the outcome of a call.
"""

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .http_primitives import Response


class ApiConnectorError(Exception):
    """Base exception for all api_connector errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class TransportError(ApiConnectorError):
    """Raised by a transport when the underlying HTTP call fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Transport error: {message}", cause)


class StatusError(TransportError):
    """Raised by a transport when it refuses a response because of its status."""

    def __init__(self, response: "Response") -> None:
        super().__init__(f"unexpected status {response.status}")
        self.response = response


class Cancelled(ApiConnectorError):
    """
    Cancellation marker.

    Transports raise it when the call was aborted through its
    cancel token, so the request can route the outcome to the
    cancel handlers instead of the error handlers.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Request cancelled")


class RequestRejected(ApiConnectorError):
    """
    Base class for tagged rejections raised from a request handle.

    ``data`` holds the value returned by the last handler of the
    category that ran, so callers can tell outcomes apart through
    ``is_fail`` / ``is_cancel`` without parsing messages.
    """

    is_fail = False
    is_cancel = False

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.data = data


class RequestFailed(RequestRejected):
    """Raised when the response did not pass the validation predicate."""

    is_fail = True

    def __init__(self, data: Any = None) -> None:
        super().__init__("Request failed validation", data)


class RequestCancelled(RequestRejected):
    """Raised when the call was cancelled before it settled."""

    is_cancel = True

    def __init__(self, data: Any = None) -> None:
        super().__init__("Request cancelled", data)


class RequestErrored(RequestRejected):
    """
    Raised when the error handlers produced a value that is not an exception.

    Exceptions coming out of the error handlers are raised as they are;
    this wrapper only exists because Python cannot raise arbitrary values.
    """

    def __init__(self, data: Any = None) -> None:
        super().__init__(f"Request errored: {data!r}", data)
