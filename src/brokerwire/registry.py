""" The :class:`BrokerRegistry` is the principal entry point for a client
    talking to a broker cluster: it discovers which broker groups serve the
    configured topic, and hands out one shared :class:`ClusterTransport` per
    broker group name.
"""

import logging
import threading

from . import poll
from .config import Settings
from .transport.base import ConfigurationError
from .transport.cluster import ClusterTransport
from .transport.discovery import NameServerDiscovery
from .transport.discovery.http import is_lookup_url, name_server_address

logger = logging.getLogger(__name__)


class BrokerRegistry:
    """ Cache one :class:`ClusterTransport` per broker group name. The
        *discovery* instance supplies the broker groups; by default the
        name servers named in the *settings* are asked. *factory* builds a
        transport from (endpoints, settings, name), and defaults to
        :class:`ClusterTransport` itself.

        If the caller always uses :func:`get` to retrieve a transport they
        will always receive the same instance for a given name, even when
        several threads ask for it at the same time.
    """

    def __init__(self, settings=None, discovery=None, factory=ClusterTransport):

        if settings is None:
            settings = Settings()

        self.settings = settings
        self.discovery = discovery
        self.factory = factory
        self.active = False

        self._brokers = list()
        self._transports = dict()
        self._lock = threading.Lock()
        self._closed = False


    def __enter__(self):
        self.start()
        return self


    def __exit__(self, *args):
        self.close()


    @property
    def brokers(self):
        """ The broker groups found by the most recent :func:`refresh`.
        """

        return list(self._brokers)


    def start(self):
        """ Resolve the name server address if it comes from an HTTP lookup,
            run the first discovery for the configured topic, and begin
            refreshing it in the background.
        """

        if self.active:
            return True

        settings = self.settings

        if is_lookup_url(settings.server):
            address = name_server_address(settings.server)
            if address:
                settings.name_server_address = address

        if self.discovery is None:
            self.discovery = NameServerDiscovery(settings)

        self.discovery.start()
        self.refresh()

        interval = settings.poll_name_server_interval
        if interval:
            poll.start(self.refresh, interval)

        self.active = True
        return True


    def refresh(self):
        """ Ask the discovery mechanism again for the broker groups serving
            the configured topic. Existing transports keep the endpoints they
            were created with.
        """

        brokers = self.discovery.resolve(self.settings.topic)
        self._brokers = list(brokers)
        return self.brokers


    def get(self, name=None):
        """ Return the shared transport for the broker group *name*, creating
            and starting it on first use. With *name* None the first known
            group is used.
        """

        brokers = self._brokers

        if name is None and len(brokers) > 0:
            name = brokers[0].name

        key = name

        with self._lock:
            try:
                return self._transports[key]
            except KeyError:
                pass

        if self._closed:
            raise ConfigurationError('the broker registry is closed')

        found = None
        for broker in brokers:
            if broker.name == name:
                found = broker
                break

        if found is None:
            raise ConfigurationError('no broker group named %r is known' % (name))

        if len(found.endpoints) == 0:
            raise ConfigurationError('broker group %r has no endpoints' % (found.name))

        candidate = self.factory(found.endpoints, self.settings, name=found.name)

        # Insert-if-absent; whichever thread loses the race discards its
        # candidate without ever starting it.

        with self._lock:
            if self._closed:
                transport = None
            else:
                transport = self._transports.setdefault(key, candidate)

        if transport is None:
            candidate.close()
            raise ConfigurationError('the broker registry is closed')

        if transport is not candidate:
            candidate.close()
            return transport

        transport.start()
        return transport


    def close(self):
        """ Stop background refreshing and close every transport handed out
            so far. Calling this more than once is harmless.
        """

        with self._lock:
            if self._closed:
                return
            self._closed = True

        self.active = False
        poll.stop(self.refresh)

        with self._lock:
            transports = list(self._transports.values())
            self._transports.clear()

        for transport in transports:
            transport.close()

        if self.discovery is not None:
            self.discovery.stop()


# end of class BrokerRegistry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
