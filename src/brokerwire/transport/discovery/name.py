"""Name server client: resolve a topic to the broker groups serving it."""

from __future__ import annotations

import logging
from typing import List, Optional

from ... import json
from ...config import Settings, parse_endpoints
from ...protocol import codes
from ..base import ConfigurationError
from ..cluster import ClusterTransport
from .base import BrokerInfo, Discovery


logger = logging.getLogger(__name__)


def parse_route(body: Optional[bytes]) -> List[BrokerInfo]:
    """Translate a topic route body into :class:`BrokerInfo` entries. Each
    group lists its master (broker id 0) first, then the remaining brokers
    in ascending id order."""

    if not body:
        return []

    route = json.lenient_loads(body)
    brokers = []

    for data in route.get("brokerDatas") or ():
        addresses = data.get("brokerAddrs") or {}
        ordered = sorted(addresses.items(), key=lambda item: int(item[0]))
        endpoints = parse_endpoints([address for _id, address in ordered])
        brokers.append(BrokerInfo(data.get("brokerName", ""), endpoints))

    return brokers


class NameClient(ClusterTransport):
    """A :class:`ClusterTransport` pointed at the name servers."""

    def __init__(self, settings: Settings, name: str = "namesrv", **kwargs):
        endpoints = parse_endpoints(settings.name_server_address)
        if not endpoints:
            raise ConfigurationError("no name server address configured")

        super().__init__(endpoints, settings, name=name, **kwargs)

    def get_route_info(self, topic: str) -> List[BrokerInfo]:
        response = self.invoke(codes.GET_ROUTEINFO_BY_TOPIC, None, {"topic": topic})
        brokers = parse_route(response.body)

        for broker in brokers:
            logger.info(
                "discovered broker [%s]: %s",
                broker.name,
                ";".join("%s:%d" % endpoint for endpoint in broker.endpoints),
            )

        return brokers


class NameServerDiscovery(Discovery):
    """Discovery backed by a :class:`NameClient`."""

    def __init__(self, settings: Settings, **kwargs):
        self.settings = settings
        self._kwargs = kwargs
        self.client: Optional[NameClient] = None

    def start(self):
        if self.client is None:
            self.client = NameClient(self.settings, **self._kwargs)
            self.client.start()

    def stop(self):
        if self.client is not None:
            self.client.close()
            self.client = None

    def resolve(self, topic: str) -> List[BrokerInfo]:
        self.start()
        return self.client.get_route_info(topic)
