"""
HTTP primitives for api_connector.

This module defines the immutable request configuration handed to
transports and the response object transports resolve with.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


Headers = Dict[str, str]
Params = Dict[str, Any]
StatusCode = int


@dataclass(frozen=True)
class RequestConfig:
    """
    Immutable description of a single HTTP call.

    ``options`` is forwarded untouched to the transport, which is
    free to interpret any extra keyword it understands.
    """

    method: str
    url: str
    params: Params = field(default_factory=dict)
    data: Any = None
    headers: Headers = field(default_factory=dict)
    timeout: Optional[float] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration data after initialization."""
        if not isinstance(self.method, str) or not self.method:
            raise ValueError("method must be a non-empty string")

        if not isinstance(self.url, str):
            raise ValueError("url must be a string")

        if not isinstance(self.params, dict):
            raise ValueError("params must be a dict")

        if not isinstance(self.headers, dict):
            raise ValueError("headers must be a dict")

        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be non-negative")

    @classmethod
    def create(
        cls,
        method: str,
        url: str,
        params: Optional[Params] = None,
        data: Any = None,
        headers: Optional[Headers] = None,
        timeout: Optional[float] = None,
        **options: Any,
    ) -> "RequestConfig":
        """
        Create a RequestConfig with normalized values.

        Args:
            method: HTTP method (GET, POST, etc.), upper-cased
            url: Absolute URL or path relative to the transport base URL
            params: Optional query parameters
            data: Optional request body
            headers: Optional request headers
            timeout: Optional per-request timeout in seconds
            **options: Extra transport options

        Returns:
            New RequestConfig instance
        """
        return cls(
            method=method.upper(),
            url=url,
            params=dict(params) if params else {},
            data=data,
            headers=dict(headers) if headers else {},
            timeout=timeout,
            options=options,
        )

    def merge(self, **changes: Any) -> "RequestConfig":
        """Create a new config with the given fields replaced."""
        if "method" in changes:
            changes["method"] = changes["method"].upper()
        return replace(self, **changes)

    def dedup_material(self, identifier: Any = "") -> str:
        """
        Build the string the single-flight key is hashed from.

        A None identifier counts as an empty one, so it shares its key
        with calls started without an identifier.
        """
        if identifier is None:
            identifier = ""
        return f"{self.method}{self.url}{identifier}"


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response representation.

    ``raw`` keeps the transport-native response object around
    for callers that need more than status, headers and body.
    """

    status: StatusCode
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    config: Optional[RequestConfig] = None
    raw: Any = None

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status, int) or isinstance(self.status, bool):
            raise ValueError("status must be int")

        if not isinstance(self.headers, dict):
            raise ValueError("headers must be a dict")

        if not isinstance(self.content, bytes):
            raise ValueError("content must be bytes")

    @classmethod
    def create(
        cls,
        status: StatusCode,
        headers: Optional[Headers] = None,
        content: Any = b"",
        config: Optional[RequestConfig] = None,
        raw: Any = None,
    ) -> "Response":
        """
        Create a Response, encoding text content as UTF-8.

        Args:
            status: HTTP status code
            headers: Optional response headers
            content: Body as bytes or str
            config: The request configuration that produced this response
            raw: Transport-native response object

        Returns:
            New Response instance
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        return cls(
            status=status,
            headers=dict(headers) if headers else {},
            content=content,
            config=config,
            raw=raw,
        )

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.content)

    def get_header(self, name: str) -> Optional[str]:
        """Get a header value by name (case-insensitive)."""
        name_lower = name.lower()
        for header_name, header_value in self.headers.items():
            if header_name.lower() == name_lower:
                return header_value

        return None
