"""Discovery contract: which endpoint groups serve a topic."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, NamedTuple, Tuple


class BrokerInfo(NamedTuple):
    """One endpoint group, typically a broker master and its slaves; the
    master address comes first."""

    name: str
    endpoints: List[Tuple[str, int]]


class Discovery(ABC):

    # lifecycle
    def start(self):
        pass

    def stop(self):
        pass

    # query known endpoint groups
    @abstractmethod
    def resolve(self, topic: str) -> List[BrokerInfo]:
        pass
