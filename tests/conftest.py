import io
import socket
import socketserver
import threading

import pytest

from brokerwire.protocol import codes
from brokerwire.protocol.command import Command, Header
from brokerwire.transport.base import Connection, ConnectionTimeout, NetworkFailure


class Buffer:
    """ A byte stream with the exact-read semantics of a connection.
    """

    def __init__(self, data=b''):
        self.stream = io.BytesIO(data)

    def read(self, size):
        data = self.stream.read(size)
        if len(data) != size:
            raise NetworkFailure('short read')
        return data

    def write(self, data):
        self.stream.write(data)

    def getvalue(self):
        return self.stream.getvalue()


def respond(request, code=codes.SUCCESS, remark=None, body=None):
    header = Header(code=code, opaque=request.header.opaque, remark=remark, flag=codes.FLAG_RESPONSE)
    return Command(header, body)


def echo(request):
    return respond(request, body=request.body)


class FakeCluster:
    """ Stand-in for a set of brokers, used as a connector by the transport.
        Endpoints in *down* refuse connections; endpoints in *broken* accept
        connections but fail every write.
    """

    def __init__(self, responder=echo):
        self.responder = responder
        self.down = set()
        self.broken = set()
        self.created = list()
        self.connections = list()
        self.served = list()
        self.lock = threading.Lock()

    def __call__(self, endpoint, timeout):
        with self.lock:
            self.created.append(endpoint)

        if endpoint in self.down:
            raise ConnectionTimeout('connect to %s:%d timed out' % endpoint, endpoint)

        connection = FakeConnection(self, endpoint)

        with self.lock:
            self.connections.append(connection)

        return connection


class FakeConnection(Connection):

    def __init__(self, cluster, endpoint):
        self.cluster = cluster
        self._endpoint = endpoint
        self.closed = False
        self.pending = Buffer()

    @property
    def endpoint(self):
        return self._endpoint

    @property
    def is_open(self):
        return not self.closed

    def write(self, data):
        if self.closed:
            raise NetworkFailure('write on closed connection', self._endpoint)
        if self._endpoint in self.cluster.broken:
            raise NetworkFailure('connection reset', self._endpoint)

        request = Command.read(Buffer(data))

        with self.cluster.lock:
            self.cluster.served.append((self._endpoint, self, request))

        response = self.cluster.responder(request)
        self.pending = Buffer(response.encode())

    def read(self, size):
        return self.pending.read(size)

    def close(self):
        self.closed = True


@pytest.fixture
def cluster():
    return FakeCluster()


class _Handler(socketserver.BaseRequestHandler):

    def handle(self):
        stream = _SocketStream(self.request)
        server = self.server

        while True:
            try:
                request = Command.read(stream)
            except NetworkFailure:
                return

            server.requests.append(request)
            response = server.responder(request)
            stream.write(response.encode())


class _SocketStream:

    def __init__(self, sock):
        self.sock = sock

    def read(self, size):
        chunks = list()
        while size > 0:
            chunk = self.sock.recv(size)
            if not chunk:
                raise NetworkFailure('peer closed')
            chunks.append(chunk)
            size -= len(chunk)
        return b''.join(chunks)

    def write(self, data):
        self.sock.sendall(data)


class FakeBroker(socketserver.ThreadingTCPServer):
    """ A real TCP listener on localhost speaking the command framing.
    """

    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, responder=echo):
        socketserver.ThreadingTCPServer.__init__(self, ('127.0.0.1', 0), _Handler)
        self.responder = responder
        self.requests = list()
        self.thread = threading.Thread(target=self.serve_forever, daemon=True)
        self.thread.start()

    @property
    def endpoint(self):
        return self.server_address[:2]

    def stop(self):
        self.shutdown()
        self.server_close()


@pytest.fixture
def broker():
    server = FakeBroker()
    yield server
    server.stop()


@pytest.fixture
def free_port():
    """ A localhost port with nothing listening on it.
    """

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
