"""Connection pool for a single owner.

The pool knows nothing about endpoints or the request protocol. New
connections come from the *factory* callable the owner supplies; the owner
decides where they point.
"""

from __future__ import annotations

import collections
import logging
import threading
from typing import Callable, Deque, Optional, Set

from .base import Connection, TransportClosed


logger = logging.getLogger(__name__)


class ConnectionPool:
    """Hand out idle connections, creating new ones through *factory* when
    none are idle. At most *max_idle* connections are kept for reuse; any
    surplus returned healthy is closed."""

    max_idle = 8

    def __init__(self, factory: Callable[[], Connection], max_idle: Optional[int] = None):
        self.factory = factory
        if max_idle is not None:
            self.max_idle = int(max_idle)

        self._idle: Deque[Connection] = collections.deque()
        self._busy: Set[Connection] = set()
        self._lock = threading.Lock()
        self._closed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._idle) + len(self._busy)

    @property
    def idle(self) -> int:
        return len(self._idle)

    @property
    def busy(self) -> int:
        return len(self._busy)

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self) -> Connection:
        """Return an idle connection, or a new one from the factory. Any
        :class:`ConnectionTimeout` raised by the factory propagates."""

        with self._lock:
            if self._closed:
                raise TransportClosed("connection pool is closed")

            while self._idle:
                connection = self._idle.pop()
                if connection.is_open:
                    self._busy.add(connection)
                    return connection

        # The factory may block for up to the connect timeout; never hold the
        # lock while it runs.

        connection = self.factory()

        with self._lock:
            if self._closed:
                connection.close()
                raise TransportClosed("connection pool is closed")
            self._busy.add(connection)

        logger.debug("created %r", connection)
        return connection

    def release(self, connection: Connection, healthy: bool) -> None:
        """Return *connection* for reuse if *healthy*, otherwise discard it
        so that it is never handed out again."""

        with self._lock:
            self._busy.discard(connection)
            keep = healthy and not self._closed and len(self._idle) < self.max_idle
            if keep:
                self._idle.append(connection)

        if not keep:
            logger.debug("discarding %r (healthy=%s)", connection, healthy)
            connection.close()

    def close(self) -> None:
        """Close every idle connection, and every connection currently
        checked out. Calling this more than once is harmless."""

        with self._lock:
            self._closed = True
            doomed = list(self._idle) + list(self._busy)
            self._idle.clear()
            self._busy.clear()

        for connection in doomed:
            connection.close()
