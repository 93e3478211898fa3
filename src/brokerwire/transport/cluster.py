"""Cluster transport: request/response against one logical cluster member.

One :class:`ClusterTransport` owns the endpoint list for a cluster member
(a broker, or the name server group), a :class:`ConnectionPool`, and the
round-robin cursor used whenever the pool needs a new connection. Requests
are blocking; each one holds a connection exclusively from write to read.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence

from .. import json
from ..config import Settings
from ..protocol import codes, signing
from ..protocol.command import Command, Header, next_opaque
from .base import (
    Connection,
    ConfigurationError,
    Endpoint,
    ExhaustedEndpoints,
    NetworkFailure,
    ResponseError,
    TransportClosed,
)
from .pool import ConnectionPool
from .tcp import TcpConnection


logger = logging.getLogger(__name__)

_marker = "Exception: "

Connector = Callable[[Endpoint, float], Connection]


def shorten_remark(remark: Optional[str]) -> str:
    """Trim a broker remark to the text after the first ``Exception: ``
    marker, cut at the next ``", "``. Remarks without a marker are only cut
    at the first ``", "``."""

    if not remark:
        return ""

    index = remark.find(_marker)
    if index >= 0:
        remark = remark[index + len(_marker):]

    index = remark.find(", ")
    if index > 0:
        remark = remark[:index]

    return remark


def encode_body(body: Any) -> Optional[bytes]:
    """Raw bytes pass through; anything else is JSON encoded."""

    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    return json.dumps(body)


def merge_fields(header: Header, ext_fields: Any) -> None:
    """Merge *ext_fields* into the header, values stringified. A mapping is
    used as-is; any other object contributes its public attributes."""

    if ext_fields is None:
        return

    if isinstance(ext_fields, Mapping):
        items = ext_fields.items()
    else:
        items = ((k, v) for k, v in vars(ext_fields).items() if not k.startswith("_"))

    fields = header.ext_fields
    for key, value in items:
        if value is None:
            continue
        fields[str(key)] = json.stringify(value)


class ClusterTransport:
    """Round trips against one cluster member, with failover across its
    *endpoints*. The *settings* are shared with every other transport of the
    same client; *connector* opens a connection to one endpoint and defaults
    to :class:`TcpConnection`."""

    def __init__(
        self,
        endpoints: Sequence[Endpoint],
        settings: Optional[Settings] = None,
        name: Optional[str] = None,
        connector: Optional[Connector] = None,
    ):
        self.endpoints: tuple = tuple((host, int(port)) for host, port in endpoints)
        self.settings = settings if settings is not None else Settings()
        self.name = name
        self.connector: Connector = connector or TcpConnection

        self._cursor = 0
        self._cursor_lock = threading.Lock()
        self._closed = False
        self._started = False

        self.pool = ConnectionPool(self.create_connection, self.settings.max_idle)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} {self.describe()}>"

    def __enter__(self) -> "ClusterTransport":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def describe(self) -> str:
        return ";".join(f"{host}:{port}" for host, port in self.endpoints)

    # --- lifecycle ---

    def start(self) -> None:
        if not self.endpoints:
            raise ConfigurationError(f"no endpoints configured for {self.name!r}")

        if self._started:
            return

        self._started = True
        logger.info("[%s] cluster endpoints: %s", self.name, self.describe())

    def close(self) -> None:
        """Close every pooled connection. Safe to call more than once."""

        if self._closed:
            return

        self._closed = True
        self.pool.close()
        logger.debug("[%s] closed", self.name)

    @property
    def closed(self) -> bool:
        return self._closed

    # --- connection factory ---

    def next_endpoint(self) -> Endpoint:
        """Advance the round-robin cursor and return the endpoint it selects."""

        if not self.endpoints:
            raise ConfigurationError(f"no endpoints configured for {self.name!r}")

        with self._cursor_lock:
            self._cursor += 1
            index = (self._cursor - 1) % len(self.endpoints)

        return self.endpoints[index]

    def create_connection(self) -> Connection:
        """Open a connection to the next endpoint in the cycle; used by the
        pool whenever no idle connection is available."""

        endpoint = self.next_endpoint()
        logger.debug("[%s] connecting to %s:%d", self.name, *endpoint)
        return self.connector(endpoint, self.settings.connect_timeout)

    # --- building ---

    def on_build(self, header: Header) -> None:
        """Stamp protocol metadata onto an outgoing header, before it is
        signed. Subclasses extending this should call the parent."""

        if self.settings.signing.secured:
            header.language = codes.SECURED_LANGUAGE

    def sign(self, command: Command) -> Command:
        """Sign *command* in place if the signing context is secured."""

        context = self.settings.signing
        if context.secured:
            signing.sign(command, context.access_key, context.secret_key, context.channel)
        return command

    def build(self, code: int, body: Any = None, ext_fields: Any = None) -> Command:
        """Return an unsigned command: base header, extension fields, then
        the :meth:`on_build` hook. :meth:`send` signs it."""

        header = Header(code=code)
        command = Command(header, encode_body(body))
        merge_fields(header, ext_fields)

        self.on_build(header)
        return command

    def prepare(self, command: Command) -> Command:
        """Assign a correlation number if unset, then sign. The signature
        covers whatever extension fields are present at this point."""

        if command.header.opaque == 0:
            command.header.opaque = next_opaque()

        return self.sign(command)

    # --- round trips ---

    def send(self, command: Command, timeout: Optional[float] = None) -> Command:
        """Deliver *command* and return the broker's response. Each endpoint
        is tried at most once; a failed connection is discarded so the next
        attempt lands on a fresh connection to the next endpoint. *timeout*
        bounds each read, in seconds."""

        if self._closed:
            raise TransportClosed(f"transport {self.name!r} is closed")

        if not self.endpoints:
            raise ConfigurationError(f"no endpoints configured for {self.name!r}")

        self.prepare(command)

        if timeout is None:
            timeout = self.settings.read_timeout

        failures: List[BaseException] = []

        for attempt in range(len(self.endpoints)):
            try:
                connection = self.pool.acquire()
            except NetworkFailure as exc:
                logger.warning("[%s] attempt %d: %s", self.name, attempt + 1, exc)
                failures.append(exc)
                continue

            try:
                response = self._exchange(connection, command, timeout)
            except (NetworkFailure, OSError) as exc:
                self.pool.release(connection, healthy=False)
                logger.warning(
                    "[%s] attempt %d against %s:%d failed: %s",
                    self.name, attempt + 1, *connection.endpoint, exc,
                )
                failures.append(exc)
                continue
            except BaseException:
                self.pool.release(connection, healthy=False)
                raise

            self.pool.release(connection, healthy=True)
            return response

        raise ExhaustedEndpoints(failures) from failures[-1]

    def _exchange(self, connection: Connection, command: Command, timeout: Optional[float]) -> Command:
        setter = getattr(connection, "set_read_timeout", None)
        if setter is not None:
            setter(timeout)

        command.write(connection)
        return Command.read(connection)

    def invoke(self, code: int, body: Any = None, ext_fields: Any = None, timeout: Optional[float] = None) -> Command:
        """Build, send, and check a request. A non-zero result code raises
        :class:`ResponseError`; otherwise the response is returned as-is."""

        command = self.build(code, body, ext_fields)
        response = self.send(command, timeout)

        if response.header.code != codes.SUCCESS:
            raise ResponseError(response.header.code, shorten_remark(response.header.remark))

        return response
