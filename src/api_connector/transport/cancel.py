"""
Cooperative cancellation primitives.

A CancelSource owns a CancelToken. The token is handed to the
transport together with the request configuration; calling
``CancelSource.cancel`` flags the token and wakes up any transport
waiting on it, which then aborts the call by raising ``Cancelled``.
"""

import asyncio
from typing import Optional

from ..exceptions import Cancelled


class CancelToken:
    """Read side of a cancellation: observed by transports."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[Cancelled] = None

    @property
    def is_cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> Optional[Cancelled]:
        """The ``Cancelled`` marker, or None while not cancelled."""
        return self._reason

    def raise_if_cancelled(self) -> None:
        """Raise the cancellation marker if the token was cancelled."""
        if self._reason is not None:
            raise self._reason

    async def wait(self) -> Cancelled:
        """Wait until the token is cancelled and return the marker."""
        await self._event.wait()
        assert self._reason is not None
        return self._reason

    def _cancel(self, message: Optional[str]) -> bool:
        if self._reason is not None:
            return False
        self._reason = Cancelled(message)
        self._event.set()
        return True


class CancelSource:
    """Write side of a cancellation: held by the request that issued the call."""

    def __init__(self) -> None:
        self.token = CancelToken()

    def cancel(self, message: Optional[str] = None) -> bool:
        """
        Request cancellation of the call using this source's token.

        Only the first call has an effect.

        Returns:
            True if this call cancelled the token
        """
        return self.token._cancel(message)

    @property
    def is_cancelled(self) -> bool:
        return self.token.is_cancelled
