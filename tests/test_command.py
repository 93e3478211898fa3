import struct

import pytest

from brokerwire.protocol import codes
from brokerwire.protocol.command import Command, Header, next_opaque
from brokerwire.transport.base import NetworkFailure

from conftest import Buffer


def test_frame_layout():
    command = Command(Header(code=codes.SEND_MESSAGE, opaque=7), b'hello')
    frame = command.encode()

    total, mark = struct.unpack('>II', frame[:8])
    header_length = mark & 0xFFFFFF

    assert mark >> 24 == 0
    assert total == len(frame) - 4
    assert total == 4 + header_length + 5
    assert frame.endswith(b'hello')


def test_read_back():
    header = Header(code=codes.GET_ROUTEINFO_BY_TOPIC, opaque=12, ext_fields={'topic': 'T', 'b': '2'})
    stream = Buffer()
    Command(header, b'\x00\x01binary').write(stream)

    decoded = Command.read(Buffer(stream.getvalue()))

    assert decoded.header.code == codes.GET_ROUTEINFO_BY_TOPIC
    assert decoded.header.opaque == 12
    assert decoded.header.ext_fields == {'topic': 'T', 'b': '2'}
    assert list(decoded.header.ext_fields) == ['topic', 'b']
    assert decoded.body == b'\x00\x01binary'


def test_no_body():
    stream = Buffer()
    Command(Header(code=1, opaque=3)).write(stream)

    decoded = Command.read(Buffer(stream.getvalue()))
    assert decoded.body is None
    assert decoded.header.ext_fields == {}


def test_response_fields():
    header = Header(code=codes.SYSTEM_ERROR, opaque=5, remark='oops', flag=codes.FLAG_RESPONSE)
    stream = Buffer()
    Command(header).write(stream)

    decoded = Command.read(Buffer(stream.getvalue()))
    assert decoded.header.is_response
    assert decoded.header.remark == 'oops'
    assert decoded.header.code == codes.SYSTEM_ERROR


def test_truncated_frame():
    frame = Command(Header(code=1, opaque=1), b'body').encode()

    with pytest.raises(NetworkFailure):
        Command.read(Buffer(frame[:-2]))


def test_invalid_length():
    with pytest.raises(NetworkFailure):
        Command.read(Buffer(struct.pack('>I', 2) + b'xx'))


def test_non_json_serialization():
    header = b'{}'
    frame = struct.pack('>II', 4 + len(header), (1 << 24) | len(header)) + header

    with pytest.raises(NetworkFailure):
        Command.read(Buffer(frame))


def json_frame(header):
    return struct.pack('>II', 4 + len(header), len(header)) + header


def test_malformed_header():
    for header in (b'[]', b'"text"', b'{"code":null}', b'{"code":"abc"}', b'{"code":0,"extFields":[1]}'):
        with pytest.raises(NetworkFailure):
            Command.read(Buffer(json_frame(header)))


def test_opaque_never_zero():
    seen = set()
    for _ in range(1000):
        opaque = next_opaque()
        assert opaque != 0
        seen.add(opaque)

    assert len(seen) == 1000


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
