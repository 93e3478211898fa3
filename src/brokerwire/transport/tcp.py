"""Blocking TCP connection to a single broker endpoint."""

from __future__ import annotations

import logging
import socket
from typing import Optional

from .base import Connection, ConnectionTimeout, Endpoint, NetworkFailure


logger = logging.getLogger(__name__)


class TcpConnection(Connection):
    """A connected socket, pinned to the *endpoint* it was opened against.

    The connect is bounded by *timeout* (seconds). Reads and writes block
    unless :meth:`set_read_timeout` establishes a bound.
    """

    def __init__(self, endpoint: Endpoint, timeout: float):
        self._endpoint = (endpoint[0], int(endpoint[1]))
        self._closed = False

        host, port = self._endpoint

        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except socket.timeout as exc:
            raise ConnectionTimeout(
                f"connect to {host}:{port} timed out after {timeout * 1000:.0f}ms",
                self._endpoint,
            ) from exc
        except OSError as exc:
            raise NetworkFailure(
                f"connect to {host}:{port} failed: {exc}", self._endpoint
            ) from exc

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(None)
        self._sock = sock

        logger.debug("connected to %s:%d", host, port)

    def __repr__(self) -> str:
        host, port = self._endpoint
        state = "closed" if self._closed else "open"
        return f"<TcpConnection {host}:{port} {state}>"

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def is_open(self) -> bool:
        return not self._closed

    def set_read_timeout(self, timeout: Optional[float]) -> None:
        self._sock.settimeout(timeout)

    def write(self, data: bytes) -> None:
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise NetworkFailure(f"write to {self._label()} failed: {exc}", self._endpoint) from exc

    def read(self, size: int) -> bytes:
        chunks = []
        remaining = size

        while remaining > 0:
            try:
                chunk = self._sock.recv(remaining)
            except socket.timeout as exc:
                raise NetworkFailure(f"read from {self._label()} timed out", self._endpoint) from exc
            except OSError as exc:
                raise NetworkFailure(f"read from {self._label()} failed: {exc}", self._endpoint) from exc

            if not chunk:
                raise NetworkFailure(
                    f"connection to {self._label()} closed after {size - remaining} of {size} bytes",
                    self._endpoint,
                )

            chunks.append(chunk)
            remaining -= len(chunk)

        return b"".join(chunks)

    def close(self) -> None:
        if self._closed:
            return

        self._closed = True
        try:
            self._sock.close()
        except OSError:
            logger.debug("error closing connection to %s", self._label(), exc_info=True)

    def _label(self) -> str:
        return "%s:%d" % self._endpoint
