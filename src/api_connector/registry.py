"""
Pending request registry.

This module keeps track of the cancel functions of in-flight
single-flight requests, grouped by their dedup key, so that a new
request can cancel the ones it supersedes.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Canceler = Callable[..., Any]


class PendingRegistry:
    """
    Table of live cancel functions keyed by dedup key.

    Each bucket maps a unique, time-based entry id to the cancel
    function of one in-flight request. A bucket is deleted as soon
    as its last entry is released. All read-modify-write sequences
    run under a lock so one registry can be shared across threads.
    """

    def __init__(self) -> None:
        self._buckets: Dict[int, Dict[int, Canceler]] = {}
        self._lock = threading.Lock()
        self._last_id = 0

        # Metrics
        self._total_registered = 0
        self._total_released = 0
        self._total_cancelled = 0

    def _next_id(self) -> int:
        # time based, bumped on collision so ids stay unique
        entry_id = max(time.monotonic_ns(), self._last_id + 1)
        self._last_id = entry_id
        return entry_id

    def register(self, key: int, canceler: Canceler) -> int:
        """
        Track a cancel function under ``key``.

        Args:
            key: Dedup key of the request
            canceler: Function cancelling the request

        Returns:
            The entry id to pass to ``release``
        """
        with self._lock:
            entry_id = self._next_id()
            self._buckets.setdefault(key, {})[entry_id] = canceler
            self._total_registered += 1

        logger.debug(f"Registered pending request {entry_id} under key {key}")
        return entry_id

    def release(self, key: int, entry_id: int) -> bool:
        """
        Stop tracking an entry, deleting its bucket when it becomes empty.

        Returns:
            True if the entry was tracked
        """
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None or entry_id not in bucket:
                return False

            del bucket[entry_id]
            if not bucket:
                del self._buckets[key]
            self._total_released += 1

        logger.debug(f"Released pending request {entry_id} under key {key}")
        return True

    def cancel_all(self, key: int) -> int:
        """
        Invoke every cancel function tracked under ``key``.

        Entries stay registered until their requests settle and
        release them; this call does not wait for that.

        Returns:
            Number of cancel functions invoked
        """
        with self._lock:
            cancelers = list(self._buckets.get(key, {}).values())
            self._total_cancelled += len(cancelers)

        # called outside the lock, a canceler may settle synchronously
        for canceler in cancelers:
            canceler()

        if cancelers:
            logger.debug(f"Cancelled {len(cancelers)} pending request(s) under key {key}")
        return len(cancelers)

    def pending(self, key: int) -> int:
        """Number of live entries under ``key``."""
        with self._lock:
            return len(self._buckets.get(key, {}))

    def keys(self) -> List[int]:
        with self._lock:
            return list(self._buckets)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._buckets

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get registry metrics.

        Returns:
            Dictionary with registry metrics
        """
        with self._lock:
            return {
                "pending_keys": len(self._buckets),
                "pending_requests": sum(len(bucket) for bucket in self._buckets.values()),
                "total_registered": self._total_registered,
                "total_released": self._total_released,
                "total_cancelled": self._total_cancelled,
            }
