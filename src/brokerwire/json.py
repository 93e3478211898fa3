''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps` for command
    headers and request bodies.
'''

import re

# The business about conditionally importing the libraries is intended to
# avoid importing less efficient libraries if they are not available.

msgspec = None
orjson = None
json = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    try:
        import orjson
    except ImportError:
        pass

if msgspec is None and orjson is None:
    import json


# The msgspec 'encode' operation returns bytes, as does orjson.dumps. Every
# command body and header goes on the wire as bytes, so all 'dumps' methods
# need to return bytes as well.

def json_dumps(*args, **kwargs):
    return json.dumps(*args, separators=(',', ':'), **kwargs).encode()

if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
    DecodeError = (msgspec.DecodeError, ValueError)
elif orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = ValueError
else:
    dumps = json_dumps
    loads = json.loads
    DecodeError = ValueError


# The broker serializes some maps with bare integer keys, for example
# {"brokerAddrs":{0:"10.0.0.1:10911"}}, which no strict decoder accepts.
# String literals are matched first so their contents pass through as-is.

_bare_key = re.compile(rb'("(?:[^"\\]|\\.)*")|([{,])\s*(-?\d+)\s*:', re.DOTALL)


def _quote_key(match):

    literal = match.group(1)
    if literal is not None:
        return literal

    return match.group(2) + b'"' + match.group(3) + b'":'


def lenient_loads(data):
    """ Decode *data*, quoting any bare integer object keys first if the
        strict decode fails.
    """

    if isinstance(data, str):
        data = data.encode()

    try:
        return loads(data)
    except DecodeError:
        pass

    quoted = _bare_key.sub(_quote_key, data)
    return loads(quoted)


def stringify(value):
    """ Return the textual form of *value* as it appears in a header's
        extension fields. Booleans follow the broker's lower-case spelling.
    """

    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if isinstance(value, bytes):
        return value.decode()

    return str(value)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
