""" Configuration handling for brokerwire. A :class:`Settings` instance is
    shared by every transport created for one client; the signing variant
    is chosen once, when the :class:`Settings` is constructed.
"""

import os
import socket

from .transport.base import ConfigurationError


default_channel = 'ALIYUN'
default_port = 9876


class Unsecured:
    """ Signing context for an ordinary deployment: requests go out as built.
    """

    secured = False

    def __repr__(self):
        return 'Unsecured()'


    def __eq__(self, other):
        return isinstance(other, Unsecured)


# end of class Unsecured



class Secured:
    """ Signing context for the managed cloud deployment. Every outgoing
        request is signed with the *secret_key*, and carries the
        *access_key* and *channel* in its extension fields. Both halves of
        the credential pair are required.
    """

    secured = True

    def __init__(self, access_key, secret_key, channel=default_channel):

        if not access_key or not secret_key:
            raise ConfigurationError('both an access key and a secret key are required')

        if not channel:
            channel = default_channel

        self.access_key = access_key
        self.secret_key = secret_key
        self.channel = channel


    def __repr__(self):
        # Never echo the secret key.
        return 'Secured(access_key=%r, channel=%r)' % (self.access_key, self.channel)


    def __eq__(self, other):
        if not isinstance(other, Secured):
            return False

        mine = (self.access_key, self.secret_key, self.channel)
        theirs = (other.access_key, other.secret_key, other.channel)
        return mine == theirs


# end of class Secured



class Settings:
    """ The settings shared by every transport for one client. Any of the
        class attributes can be overridden by keyword argument.

        :ivar timeout: Connect timeout in milliseconds.
        :ivar read_timeout: Per-response read bound in seconds, or None to
            block until the broker answers or the TCP stack gives up.
        :ivar signing: An :class:`Unsecured` or :class:`Secured` instance.
        :ivar name_server_address: Semicolon-separated name server endpoints.
        :ivar server: An http(s) URL returning the name server address, for
            the managed cloud variant.
        :ivar poll_name_server_interval: Seconds between route refreshes.
        :ivar max_idle: Idle connections kept per transport.
    """

    timeout = 3000
    read_timeout = None
    name_server_address = None
    server = None
    topic = 'TBW102'
    group = 'DEFAULT_PRODUCER'
    instance_name = None
    unit_name = None
    poll_name_server_interval = 30
    max_idle = 8

    def __init__(self, signing=None, **kwargs):

        if signing is None:
            signing = Unsecured()

        self.signing = signing

        for key,value in kwargs.items():
            if not hasattr(Settings, key):
                raise TypeError('unknown setting: ' + key)
            setattr(self, key, value)

        if self.instance_name is None:
            self.instance_name = str(os.getpid())

        self.timeout = int(self.timeout)
        if self.timeout <= 0:
            raise ConfigurationError('the connect timeout must be positive, not %d' % (self.timeout))


    def __repr__(self):
        return 'Settings(name_server_address=%r, topic=%r, signing=%r)' % (
                self.name_server_address, self.topic, self.signing)


    @property
    def connect_timeout(self):
        """ The connect timeout in seconds.
        """

        return self.timeout / 1000.0


    @property
    def client_id(self):

        client_id = '%s@%s' % (client_ip(), self.instance_name)

        if self.unit_name:
            client_id += '@' + self.unit_name

        return client_id


    @classmethod
    def from_environment(cls, environ=None, **kwargs):
        """ Build a :class:`Settings` instance from BROKERWIRE_* environment
            variables. Explicit keyword arguments win over the environment.
        """

        if environ is None:
            environ = os.environ

        found = dict()

        for variable,key in _environment.items():
            try:
                value = environ[variable]
            except KeyError:
                continue

            if value == '':
                continue

            found[key] = value

        access_key = environ.get('BROKERWIRE_ACCESS_KEY')
        secret_key = environ.get('BROKERWIRE_SECRET_KEY')
        channel = environ.get('BROKERWIRE_CHANNEL') or default_channel

        if access_key or secret_key:
            found['signing'] = Secured(access_key, secret_key, channel)

        found.update(kwargs)
        return cls(**found)


# end of class Settings


_environment = dict()
_environment['BROKERWIRE_NAMESRV'] = 'name_server_address'
_environment['BROKERWIRE_SERVER'] = 'server'
_environment['BROKERWIRE_TIMEOUT'] = 'timeout'
_environment['BROKERWIRE_TOPIC'] = 'topic'
_environment['BROKERWIRE_GROUP'] = 'group'



def parse_endpoints(addresses, default=default_port):
    """ Translate *addresses* into a list of (host, port) tuples. A string
        is split on semicolons and commas; a sequence may mix strings and
        (host, port) pairs. A missing port number becomes *default*.
    """

    if addresses is None:
        return list()

    if isinstance(addresses, str):
        addresses = addresses.replace(',', ';').split(';')

    endpoints = list()

    for address in addresses:
        if isinstance(address, str):
            address = address.strip()
            if address == '':
                continue

            if '://' in address:
                address = address.split('://', 1)[1]

            if ':' in address:
                host, port = address.rsplit(':', 1)
            else:
                host = address
                port = default
        else:
            host, port = address

        try:
            port = int(port)
        except ValueError:
            raise ConfigurationError('invalid port in address %r' % (address))

        endpoints.append((host, port))

    return endpoints


def client_ip():
    """ Return a best guess at the local address other hosts see.
    """

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packets are sent; connecting a UDP socket only picks a route.
        sock.connect(('10.255.255.255', 1))
        address = sock.getsockname()[0]
    except OSError:
        address = '127.0.0.1'
    finally:
        sock.close()

    return address


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
