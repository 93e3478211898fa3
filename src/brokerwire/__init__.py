""" Python client transport for a RocketMQ-style broker cluster. This covers
    connection pooling with round-robin endpoint selection, request signing
    for the managed cloud variant, failover across endpoints, and discovery
    of the broker groups serving a topic.
"""

# Utility components.

from . import json
from . import poll

# Submodules used by multiple other components.

from . import transport
from . import protocol
from . import config
from .config import Settings, Secured, Unsecured

# Primary public-facing interfaces.

from .transport.base import (
    TransportError,
    ConfigurationError,
    NetworkFailure,
    ConnectionTimeout,
    ExhaustedEndpoints,
    ResponseError,
)
from .transport.cluster import ClusterTransport
from .registry import BrokerRegistry

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
