"""Discovery of the broker endpoint groups serving a topic."""

from .base import BrokerInfo, Discovery
from .static import StaticDiscovery
from .name import NameClient, NameServerDiscovery, parse_route
from .http import name_server_address
