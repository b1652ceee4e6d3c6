"""
Resumable handler pipeline.

A Pipe passes a value through its handlers so that each handler
receives the previous handler's output. Handlers joined after the
pipe already ran are applied to the last computed value on the
next ``process`` call, which is what lets callbacks be attached to
a request after it settled.
"""

from typing import Any, Callable, List

Handler = Callable[[Any], Any]


class Pipe:
    """Ordered, resumable chain of unary handlers."""

    def __init__(self) -> None:
        self._handlers: List[Handler] = []
        self._cursor = 0
        self._value: Any = None
        self._processed = False

    def join(self, handler: Handler) -> None:
        """Append a handler to the end of the pipe."""
        self._handlers.append(handler)

    def process(self, data: Any = None) -> Any:
        """
        Run every handler that has not run yet.

        Args:
            data: Input of the first handler. Ignored once the pipe has
                been processed; the last computed value is used instead.

        Returns:
            The value produced by the last handler, or ``data`` itself
            when the pipe is empty.
        """
        if not self._processed:
            self._value = data
            self._processed = True

        while self._cursor < len(self._handlers):
            handler = self._handlers[self._cursor]
            # advance first so a raising handler is not replayed
            self._cursor += 1
            self._value = handler(self._value)

        return self._value

    def reset(self) -> None:
        """Rewind the pipe so the next ``process`` starts from the first handler."""
        self._cursor = 0
        self._value = None
        self._processed = False

    @property
    def started(self) -> bool:
        """Whether ``process`` has run since the last reset."""
        return self._processed

    @property
    def value(self) -> Any:
        return self._value

    def __len__(self) -> int:
        return len(self._handlers)
