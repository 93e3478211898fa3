""" A class representation of a broker remoting command: a :class:`Header`
    plus an optional binary body, and the length-prefixed framing used to
    put one on the wire.

    Frame layout, all integers big-endian::

        [total length: 4][serialize type: 1][header length: 3][header][body]

    The total length counts everything after itself. The serialize type is
    always zero (JSON) here.
"""

import itertools
import struct
import threading

from .. import json
from ..transport.base import NetworkFailure
from . import codes


_length = struct.Struct('>I')

# Refuse frames larger than this; a corrupt length prefix would otherwise
# try to allocate gigabytes.

maximum_frame = 16 * 1024 * 1024


class Header:
    """ The :class:`Header` carries the operation *code* for a request, or
        the result code for a response, along with the correlation *opaque*
        number and the *ext_fields* mapping. The *remark* is only meaningful
        in the response direction, where the broker uses it for a human
        readable description of any failure.

        :ivar ext_fields: Extension fields, an insertion-ordered dictionary
            of string keys to string values.
        :ivar flag: Bit field; :data:`codes.FLAG_RESPONSE` marks a response.
    """

    def __init__(self, code=0, opaque=0, ext_fields=None, remark=None,
                 flag=0, language=codes.LANGUAGE, version=codes.VERSION):

        self.code = int(code)
        self.opaque = int(opaque)
        self.flag = int(flag)
        self.remark = remark
        self.language = language
        self.version = int(version)

        if ext_fields is None:
            ext_fields = dict()

        self.ext_fields = ext_fields


    def __repr__(self):
        return 'Header(code=%d, opaque=%d, flag=%d, remark=%r, ext_fields=%r)' % (
                self.code, self.opaque, self.flag, self.remark, self.ext_fields)


    @property
    def is_response(self):
        return bool(self.flag & codes.FLAG_RESPONSE)


    def to_dict(self):
        """ Return the JSON-ready dictionary with the key names the broker
            expects.
        """

        header = dict()
        header['code'] = self.code
        header['language'] = self.language
        header['version'] = self.version
        header['opaque'] = self.opaque
        header['flag'] = self.flag

        if self.remark is not None:
            header['remark'] = self.remark

        if self.ext_fields:
            header['extFields'] = self.ext_fields

        header['serializeTypeCurrentRPC'] = 'JSON'
        return header


    @classmethod
    def from_dict(cls, header):

        ext_fields = header.get('extFields')
        if ext_fields is None:
            ext_fields = dict()

        return cls(code=header.get('code', 0),
                   opaque=header.get('opaque', 0),
                   ext_fields=ext_fields,
                   remark=header.get('remark'),
                   flag=header.get('flag', 0),
                   language=header.get('language', codes.LANGUAGE),
                   version=header.get('version', 0))


# end of class Header



class Command:
    """ A :class:`Command` is the request/response unit: a *header* and an
        optional *body*, which is always bytes when present. The same class
        is used for both directions; :func:`read` builds the response side.
    """

    def __init__(self, header=None, body=None):

        if header is None:
            header = Header()

        if body is not None and not isinstance(body, bytes):
            body = bytes(body)

        self.header = header
        self.body = body


    def __repr__(self):
        if self.body is None:
            length = 0
        else:
            length = len(self.body)

        return 'Command(%r, body=%d bytes)' % (self.header, length)


    def encode(self):
        """ Return the complete frame for this command as bytes.
        """

        header = json.dumps(self.header.to_dict())
        body = self.body or b''

        header_length = len(header)
        if header_length > 0xFFFFFF:
            raise ValueError('header too large to frame: %d bytes' % (header_length))

        total = 4 + header_length + len(body)
        parts = (_length.pack(total), _length.pack(header_length), header, body)
        return b''.join(parts)


    def write(self, stream):
        """ Write this command to *stream*, which needs only a blocking
            ``write(bytes)`` method.
        """

        stream.write(self.encode())


    @classmethod
    def read(cls, stream):
        """ Read one complete command from *stream*, which needs only a
            blocking ``read(size)`` method returning exactly *size* bytes.
        """

        total = _length.unpack(stream.read(4))[0]

        if total < 4 or total > maximum_frame:
            raise NetworkFailure('invalid frame length: %d' % (total))

        mark = _length.unpack(stream.read(4))[0]
        serialize_type = mark >> 24
        header_length = mark & 0xFFFFFF

        if serialize_type != 0:
            raise NetworkFailure('unsupported header serialization: %d' % (serialize_type))

        if header_length > total - 4:
            raise NetworkFailure('header length %d exceeds frame length %d' % (header_length, total))

        header = stream.read(header_length)
        body_length = total - 4 - header_length

        if body_length > 0:
            body = stream.read(body_length)
        else:
            body = None

        try:
            header = json.lenient_loads(header)
        except json.DecodeError as exc:
            raise NetworkFailure('undecodable command header: %s' % (exc)) from exc

        if not isinstance(header, dict):
            raise NetworkFailure('command header is not an object: %r' % (header,))

        ext_fields = header.get('extFields')
        if ext_fields is not None and not isinstance(ext_fields, dict):
            raise NetworkFailure('command extFields is not an object: %r' % (ext_fields,))

        try:
            header = Header.from_dict(header)
        except (TypeError, ValueError) as exc:
            raise NetworkFailure('invalid command header: %s' % (exc)) from exc

        return cls(header, body)


# end of class Command



_opaque_min = 1
_opaque_max = 0x7FFFFFFF
_opaque_lock = threading.Lock()
_opaque_ticker = itertools.count(_opaque_min)


def next_opaque():
    """ Return the next correlation number for a request. The value is
        never zero and wraps around well before overflowing a signed 32-bit
        integer, which is what the broker expects.
    """

    global _opaque_ticker
    _opaque_lock.acquire()
    opaque = next(_opaque_ticker)

    if opaque >= _opaque_max:
        _opaque_ticker = itertools.count(_opaque_min)

    _opaque_lock.release()
    return opaque


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
