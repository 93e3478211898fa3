"""Transport layer: connections, pooling, and the cluster transport."""

from .base import (
    TransportError,
    ConfigurationError,
    TransportClosed,
    NetworkFailure,
    ConnectionTimeout,
    ExhaustedEndpoints,
    ResponseError,
    Connection,
)
from .pool import ConnectionPool
from .tcp import TcpConnection
