"""
Tests for HttpxTransport.

The transport is exercised against ``httpx.MockTransport`` so no
network access is needed.
"""

import asyncio
import json

import httpx
import pytest

from api_connector import (
    ApiConnector,
    Cancelled,
    RequestCancelled,
    RequestConfig,
    StatusError,
    TransportError,
)
from api_connector.transport import CancelSource, HttpxTransport


def echo_handler(request: httpx.Request) -> httpx.Response:
    """Answer with a description of the request, like a test echo server."""
    body = request.content.decode() or None
    payload = {
        "url": request.url.path,
        "method": request.method,
        "params": dict(request.url.params),
        "data": json.loads(body) if body else None,
    }
    status = int(request.url.params.get("status", 200))
    return httpx.Response(status, json=payload)


def make_transport(handler=echo_handler, **kwargs) -> HttpxTransport:
    client = httpx.AsyncClient(base_url="http://testserver", transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client, **kwargs)


class TestHttpxTransport:
    """Test the httpx transport."""

    @pytest.mark.asyncio
    async def test_get_with_params(self):
        """Test a GET call carries its query parameters."""
        transport = make_transport()
        config = RequestConfig.create("GET", "/get-request", params={"any": "param"})

        response = await transport.issue(config, CancelSource().token)

        assert response.status == 200
        assert response.config is config
        assert isinstance(response.raw, httpx.Response)
        assert response.json() == {
            "url": "/get-request",
            "method": "GET",
            "params": {"any": "param"},
            "data": None,
        }

    @pytest.mark.asyncio
    async def test_post_json_body(self):
        """Test mapping bodies are sent as JSON."""
        transport = make_transport()
        config = RequestConfig.create("POST", "/post-request", params={"any": "param"}, data={"any": "data"})

        response = await transport.issue(config, CancelSource().token)

        assert response.json()["data"] == {"any": "data"}
        assert response.json()["method"] == "POST"

    @pytest.mark.asyncio
    async def test_raw_body_and_headers(self):
        """Test str bodies are sent as content with request headers."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["content"] = request.content
            seen["header"] = request.headers.get("X-Trace")
            return httpx.Response(200)

        transport = make_transport(handler)
        config = RequestConfig.create("PUT", "/raw", data="plain", headers={"X-Trace": "abc"})
        await transport.issue(config, CancelSource().token)

        assert seen == {"content": b"plain", "header": "abc"}

    @pytest.mark.asyncio
    async def test_rejected_status_raises_status_error(self):
        """Test non-2xx statuses are raised by default."""
        transport = make_transport()
        config = RequestConfig.create("GET", "/error", params={"status": 500})

        with pytest.raises(StatusError) as exc_info:
            await transport.issue(config, CancelSource().token)

        assert exc_info.value.response.status == 500

    @pytest.mark.asyncio
    async def test_status_validation_can_be_disabled(self):
        """Test validate_status=None resolves with every response."""
        transport = make_transport(validate_status=None)
        config = RequestConfig.create("GET", "/error", params={"status": 500})

        response = await transport.issue(config, CancelSource().token)
        assert response.status == 500

    @pytest.mark.asyncio
    async def test_http_errors_are_wrapped(self):
        """Test httpx errors become TransportError with the cause kept."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler)

        with pytest.raises(TransportError) as exc_info:
            await transport.issue(RequestConfig.create("GET", "/"), CancelSource().token)

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert not transport.is_cancellation(exc_info.value)

    @pytest.mark.asyncio
    async def test_cancelled_token_refuses_call(self):
        """Test an already cancelled token never reaches the client."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        transport = make_transport(handler)
        source = CancelSource()
        source.cancel()

        with pytest.raises(Cancelled):
            await transport.issue(RequestConfig.create("GET", "/"), source.token)
        assert calls == []

    @pytest.mark.asyncio
    async def test_in_flight_call_is_aborted(self):
        """Test cancelling the token aborts a pending call."""
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200)

        transport = make_transport(handler)
        source = CancelSource()
        call = asyncio.ensure_future(transport.issue(RequestConfig.create("GET", "/slow"), source.token))
        await asyncio.sleep(0.01)

        source.cancel("user abort")

        with pytest.raises(Cancelled) as exc_info:
            await asyncio.wait_for(call, 1.0)
        assert exc_info.value.message == "user abort"
        assert transport.is_cancellation(exc_info.value)

    @pytest.mark.asyncio
    async def test_borrowed_client_is_not_closed(self):
        """Test aclose leaves a client passed in by the caller open."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(echo_handler))
        transport = HttpxTransport(client=client)

        await transport.aclose()
        assert not client.is_closed
        await client.aclose()


class TestConnectorOverHttpx:
    """Test requests end to end over the httpx transport."""

    @pytest.mark.asyncio
    async def test_ok_response(self):
        """Test a request resolves through its ok handlers."""
        connector = ApiConnector(transport=make_transport())

        url = await connector.get("/ok").on_ok(lambda r: r.json()["url"]).start()
        assert url == "/ok"

    @pytest.mark.asyncio
    async def test_server_error_goes_to_error_handlers(self):
        """Test a rejected status reaches the error handlers."""
        connector = ApiConnector(transport=make_transport())
        seen = []

        with pytest.raises(StatusError):
            await connector.get("/error", {"status": 500}).on_error(lambda e: seen.append(e) or e).start()

        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_single_flight_over_httpx(self):
        """Test a slow call is cancelled by a newer call with the same key."""
        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("slow"):
                await asyncio.sleep(10)
            return httpx.Response(200, json={"path": request.url.path})

        connector = ApiConnector(transport=make_transport(handler))

        first = connector.get("/same", {"slow": "1"}).start_single("same")
        await asyncio.sleep(0.01)
        second = connector.get("/same").start_single("same")

        with pytest.raises(RequestCancelled):
            await first
        assert (await second).json() == {"path": "/same"}
        assert len(connector.pending) == 0
