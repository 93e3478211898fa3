""" Look up the broker groups serving a topic, then send a heartbeat to
    each of them. The name server address comes from the command line, or
    from the BROKERWIRE_NAMESRV environment variable.

    python examples/route.py --namesrv 127.0.0.1:9876 --topic TBW102
"""

import argparse
import logging

import brokerwire
from brokerwire.protocol import codes


def main():

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--namesrv', default=None)
    parser.add_argument('--topic', default=None)
    parser.add_argument('--verbose', action='store_true')
    arguments = parser.parse_args()

    if arguments.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s %(message)s')

    overrides = dict()
    if arguments.namesrv:
        overrides['name_server_address'] = arguments.namesrv
    if arguments.topic:
        overrides['topic'] = arguments.topic

    settings = brokerwire.Settings.from_environment(**overrides)

    with brokerwire.BrokerRegistry(settings) as registry:
        for broker in registry.brokers:
            transport = registry.get(broker.name)

            heartbeat = dict()
            heartbeat['clientID'] = settings.client_id
            heartbeat['producerDataSet'] = [{'groupName': settings.group}]
            heartbeat['consumerDataSet'] = []

            try:
                transport.invoke(codes.HEART_BEAT, heartbeat)
            except brokerwire.TransportError as error:
                print('%s: %s' % (broker.name, error))
            else:
                print('%s: ok' % (broker.name))


if __name__ == '__main__':
    main()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
