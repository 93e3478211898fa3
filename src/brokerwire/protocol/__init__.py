from . import codes
from . import command
from . import signing

from .command import Command, Header


"""
brokerwire Protocol Layer
=========================

This package defines the broker remoting command and the pieces that touch
its bytes: the header model, the frame codec, and request signing.

The protocol layer does not open sockets or pick endpoints; it only needs
something with blocking ``read(size)`` and ``write(data)`` methods.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Cluster Transport (transport/cluster.py)
    invoke() / send()
    - builds the header, enriches it, signs it
    - failover across endpoints
    - result code translation

    │
    ▼
Command Model + Codec (command.py)
    Header, Command
    - JSON header, binary body
    - length-prefixed frame

    │
    ▼
Signing (signing.py)
    HMAC-SHA1 over the final extension fields and body

    │
    ▼
Codes (codes.py)
    Canonical request/response codes and field names

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
