from typing import Dict, List

from ...config import parse_endpoints
from .base import BrokerInfo, Discovery


class StaticDiscovery(Discovery):
    """
    Discovery through configured broker endpoints, the same for every topic.
    """

    def __init__(self, brokers: Dict[str, object]):
        self._brokers = [BrokerInfo(name, parse_endpoints(addresses)) for name, addresses in brokers.items()]

    def resolve(self, topic) -> List[BrokerInfo]:
        return list(self._brokers)
