"""
Request state machine for api_connector.

This module implements ApiRequest, which wraps a single HTTP call
with chainable event handlers, classifies the outcome of the call
(ok, fail, cancel or error), dispatches on the response status and
optionally cancels pending calls sharing the same dedup key.
"""

import asyncio
import functools
import logging
from enum import Enum
from typing import Any, Callable, Dict, Generator, List, Optional, Union

from .events import Event, EventSpec, Status, parse_event
from .exceptions import RequestCancelled, RequestErrored, RequestFailed
from .hashing import hash_code
from .http_primitives import RequestConfig, Response
from .pipe import Handler, Pipe
from .registry import PendingRegistry
from .transport import CancelSource, Transport

logger = logging.getLogger(__name__)

Validator = Callable[[Response], bool]


class RequestState(Enum):
    """States of an ApiRequest."""
    IDLE = "idle"             # never started
    IN_FLIGHT = "in-flight"   # at least one call pending
    OK = "ok"                 # last call settled as ok
    FAIL = "fail"             # last call failed validation
    CANCELLED = "cancelled"   # last call was cancelled
    ERRORED = "errored"       # last call raised in the transport


_SETTLED_STATES = {
    Event.OK: RequestState.OK,
    Event.FAIL: RequestState.FAIL,
    Event.CANCEL: RequestState.CANCELLED,
    Event.ERROR: RequestState.ERRORED,
}


def _retrieve_exception(task: "asyncio.Task[Any]") -> None:
    # Marks the outcome as retrieved for handles nobody awaits.
    if not task.cancelled():
        task.exception()


class RequestHandle:
    """
    Asynchronous handle of one started call.

    Awaiting the handle returns the value of the last ok handler, or
    raises the rejection of the call. ``cancel`` aborts the call.
    """

    def __init__(self, task: "asyncio.Task[Any]", source: CancelSource) -> None:
        self._task = task
        self._source = source

    def __await__(self) -> Generator[Any, None, Any]:
        return self._task.__await__()

    def cancel(self, message: Optional[str] = None) -> bool:
        """Cancel the call; returns False if it was already cancelled."""
        return self._source.cancel(message)

    @property
    def canceler(self) -> Callable[..., bool]:
        """The cancel function of the call."""
        return self._source.cancel

    @property
    def task(self) -> "asyncio.Task[Any]":
        return self._task

    def done(self) -> bool:
        return self._task.done()

    def result(self) -> Any:
        return self._task.result()


class ApiRequest:
    """
    Cancellable HTTP request with chainable event handlers.

    Handlers can be attached to the following events:

    + *successful* response (``on_ok``)
    + *failed* response (``on_fail``)
    + any response (``on_response``)
    + cancellation (``on_cancel``)
    + transport error (``on_error``)
    + any of the above (``then``)
    + failed response, cancellation or error (``on_any_error``)
    + exact status code (``on_status``)
    + any event combination (``on_any``)

    Handlers of one event run in attachment order, each receiving
    the previous handler's return value. A handler attached after
    its event already fired runs right away against the last value.

    A request can be started any number of times; every start issues
    a new call and replays the handlers against its outcome.
    """

    def __init__(
        self,
        transport: Transport,
        pending: PendingRegistry,
        validate: Optional[Validator],
        config: RequestConfig,
    ):
        """
        Initialize the request.

        Args:
            transport: Transport used to issue the calls
            pending: Registry of pending single-flight calls
            validate: Predicate deciding whether a response is
                *successful*; None accepts every response
            config: Configuration of the call
        """
        self._transport = transport
        self._pending = pending
        self._validate = validate
        self._config = config

        self._pipes: Dict[Event, Pipe] = {event: Pipe() for event in Event}
        self._status_pipes: Dict[int, Pipe] = {}

        self._cancel_source: Optional[CancelSource] = None
        self._active_calls = 0
        self._last_event: Optional[Event] = None
        self._last_response: Optional[Response] = None

    @property
    def config(self) -> RequestConfig:
        return self._config

    @property
    def state(self) -> RequestState:
        if self._active_calls:
            return RequestState.IN_FLIGHT
        if self._last_event is None:
            return RequestState.IDLE
        return _SETTLED_STATES[self._last_event]

    def on_any(self, callback: Handler, *event_names: Union[str, EventSpec]) -> "ApiRequest":
        """
        Attach a handler to all given events.

        Supported names are ``"onOk"``, ``"onFail"``, ``"onCancel"``,
        ``"onError"``, ``"onStatus=<code>"`` and
        ``"onStatus=<JSON array of codes>"``, as well as ``Event`` and
        ``Status`` values. Unsupported names are ignored.

        Returns:
            The same request
        """
        joined: List[Pipe] = []
        for name in event_names:
            for event in parse_event(name):
                pipe = self._pipe_for(event)
                pipe.join(callback)
                if pipe not in joined:
                    joined.append(pipe)

        if not self._active_calls:
            for pipe in joined:
                self._catch_up(pipe)
        return self

    def on_ok(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to *successful* responses."""
        return self.on_any(callback, Event.OK)

    def on_fail(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to *failed* responses."""
        return self.on_any(callback, Event.FAIL)

    def on_response(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to any response."""
        return self.on_any(callback, Event.OK, Event.FAIL)

    def on_cancel(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to cancellation."""
        return self.on_any(callback, Event.CANCEL)

    def on_error(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to transport errors."""
        return self.on_any(callback, Event.ERROR)

    def then(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to every outcome."""
        return self.on_any(callback, Event.OK, Event.FAIL, Event.CANCEL, Event.ERROR)

    def on_status(self, callback: Handler, *statuses: int) -> "ApiRequest":
        """
        Attach a handler to responses with one of the given status codes.

        Status handlers run before the response is classified and
        their return value is discarded.
        """
        return self.on_any(callback, *(Status(status) for status in statuses))

    def on_any_error(self, callback: Handler) -> "ApiRequest":
        """Attach a handler to failed responses, cancellation and errors."""
        return self.on_any(callback, Event.FAIL, Event.ERROR, Event.CANCEL)

    def dedup_key(self, identifier: Any = "") -> int:
        """Key grouping calls with the same method, url and identifier."""
        return hash_code(self._config.dedup_material(identifier))

    def start(self, identifier: Any = "", throwable: bool = True) -> RequestHandle:
        """
        Issue the call.

        Must be called from a running event loop.

        Args:
            identifier: Label of the call, used in log messages
            throwable: When False the handle never raises for failed,
                cancelled or errored calls and returns the last
                handler value instead

        Returns:
            Handle of the call
        """
        loop = asyncio.get_running_loop()
        source = self._transport.create_cancellation()
        return self._launch(loop, source, identifier, throwable)

    def start_single(self, identifier: Any = "", throwable: bool = True) -> RequestHandle:
        """
        Issue the call, cancelling pending calls with the same method,
        url and identifier first.

        Must be called from a running event loop.

        Args:
            identifier: Part of the dedup key
            throwable: See ``start``

        Returns:
            Handle of the call
        """
        loop = asyncio.get_running_loop()
        key = self.dedup_key(identifier)
        self._pending.cancel_all(key)

        source = self._transport.create_cancellation()
        entry_id = self._pending.register(
            key, functools.partial(source.cancel, "Superseded by a newer request")
        )
        release = functools.partial(self._pending.release, key, entry_id)
        return self._launch(loop, source, identifier, throwable, release)

    def cancel(self, message: Optional[str] = None) -> bool:
        """
        Cancel the most recent pending call.

        Returns:
            True if a call was cancelled
        """
        source = self._cancel_source
        if source is None:
            return False
        return source.cancel(message)

    def _launch(
        self,
        loop: asyncio.AbstractEventLoop,
        source: CancelSource,
        identifier: Any,
        throwable: bool,
        release: Optional[Callable[[], Any]] = None,
    ) -> RequestHandle:
        self._cancel_source = source
        self._active_calls += 1
        task = loop.create_task(self._run(source, identifier, throwable, release))
        task.add_done_callback(_retrieve_exception)
        return RequestHandle(task, source)

    async def _run(
        self,
        source: CancelSource,
        identifier: Any,
        throwable: bool,
        release: Optional[Callable[[], Any]],
    ) -> Any:
        config = self._config
        logger.debug(f"Issuing {config.method} {config.url} (identifier={identifier!r})")

        try:
            failure: Optional[Exception] = None
            response: Optional[Response] = None
            try:
                response = await self._transport.issue(config, source.token)
            except Exception as e:
                failure = e
            finally:
                self._active_calls -= 1
                if self._cancel_source is source:
                    self._cancel_source = None

            return self._settle(response, failure, throwable)
        finally:
            if release is not None:
                release()

    def _settle(
        self,
        response: Optional[Response],
        failure: Optional[Exception],
        throwable: bool,
    ) -> Any:
        for pipe in self._all_pipes():
            pipe.reset()

        config = self._config
        try:
            if failure is None:
                event = self._dispatch_response(response)
                value = self._pipes[event].process(response)
            else:
                event = Event.CANCEL if self._transport.is_cancellation(failure) else Event.ERROR
                self._last_event = event
                self._last_response = None
                value = self._pipes[event].process(failure)
        except Exception as e:
            logger.error(f"Handler of {config.method} {config.url} raised: {e!r}")
            raise

        logger.debug(f"{config.method} {config.url} settled as {event.name}")

        if event is Event.OK or not throwable:
            return value
        if event is Event.FAIL:
            raise RequestFailed(value)
        if event is Event.CANCEL:
            raise RequestCancelled(value)
        if isinstance(value, BaseException):
            raise value
        raise RequestErrored(value)

    def _dispatch_response(self, response: Response) -> Event:
        self._last_response = response
        status_pipe = self._status_pipes.get(response.status)
        if status_pipe is not None:
            status_pipe.process(response)

        if self._validate is None or self._validate(response):
            event = Event.OK
        else:
            event = Event.FAIL
        self._last_event = event
        return event

    def _catch_up(self, pipe: Pipe) -> None:
        if pipe.started:
            pipe.process()
            return

        # status pipes created after settlement have never seen the response
        response = self._last_response
        if response is not None and self._status_pipes.get(response.status) is pipe:
            pipe.process(response)

    def _pipe_for(self, event: EventSpec) -> Pipe:
        if isinstance(event, Status):
            pipe = self._status_pipes.get(event.code)
            if pipe is None:
                pipe = self._status_pipes[event.code] = Pipe()
            return pipe
        return self._pipes[event]

    def _all_pipes(self) -> List[Pipe]:
        return list(self._pipes.values()) + list(self._status_pipes.values())
