"""Transport interface.

The exceptions and the (small) connection contract that the pool and the
cluster transport rely on. Any object honoring :class:`Connection` can be
pooled; the pool itself never looks past this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


Endpoint = Tuple[str, int]


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class ConfigurationError(TransportError, ValueError):
    """The transport was configured in a way it cannot operate with."""


class TransportClosed(TransportError):
    """The transport or pool has already been closed."""


class NetworkFailure(TransportError):
    """An I/O failure while connecting to, writing to or reading from an
    endpoint. The failover loop treats this as a failed attempt."""

    def __init__(self, message: str, endpoint: Optional[Endpoint] = None):
        super().__init__(message)
        self.endpoint = endpoint


class ConnectionTimeout(NetworkFailure, TimeoutError):
    """A connection attempt did not complete within the connect timeout."""


class ExhaustedEndpoints(NetworkFailure):
    """Every configured endpoint failed within one send. The last failure is
    also the ``__cause__`` of this exception."""

    def __init__(self, failures: List[BaseException]):
        self.failures = list(failures)
        last = self.failures[-1] if self.failures else None
        endpoint = getattr(last, "endpoint", None)
        super().__init__(
            f"all {len(self.failures)} attempts failed, last error: {last}",
            endpoint,
        )

    @property
    def last(self) -> Optional[BaseException]:
        return self.failures[-1] if self.failures else None


class ResponseError(TransportError):
    """The broker received the request and answered with a non-zero result
    code. Never retried."""

    def __init__(self, code: int, message: str):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


class Connection(ABC):
    """Minimal contract for a pooled connection pinned to one endpoint."""

    @property
    @abstractmethod
    def endpoint(self) -> Endpoint:
        """The endpoint chosen when the connection was created."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying socket. Safe to call more than once."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of *data*."""

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read exactly *size* bytes."""

    @property
    def is_open(self) -> bool:
        """Whether the connection is currently usable."""
        return False
