import pytest

from brokerwire.config import Secured, Settings, Unsecured, parse_endpoints
from brokerwire.transport.base import ConfigurationError


def test_defaults():
    settings = Settings()

    assert settings.timeout == 3000
    assert settings.connect_timeout == 3.0
    assert settings.read_timeout is None
    assert settings.signing == Unsecured()
    assert settings.topic == 'TBW102'
    assert settings.group == 'DEFAULT_PRODUCER'
    assert settings.instance_name


def test_unknown_setting():
    with pytest.raises(TypeError):
        Settings(bogus=1)


def test_secured_requires_both_halves():
    with pytest.raises(ConfigurationError):
        Secured('AK', '')

    with pytest.raises(ConfigurationError):
        Secured(None, 'SK')

    secured = Secured('AK', 'SK')
    assert secured.channel == 'ALIYUN'
    assert 'SK' not in repr(secured)


def test_from_environment():
    environ = dict()
    environ['BROKERWIRE_NAMESRV'] = '10.0.0.1:9876;10.0.0.2:9876'
    environ['BROKERWIRE_TIMEOUT'] = '1500'
    environ['BROKERWIRE_ACCESS_KEY'] = 'AK'
    environ['BROKERWIRE_SECRET_KEY'] = 'SK'
    environ['BROKERWIRE_TOPIC'] = ''

    settings = Settings.from_environment(environ, group='mine')

    assert settings.name_server_address == '10.0.0.1:9876;10.0.0.2:9876'
    assert settings.timeout == 1500
    assert settings.signing == Secured('AK', 'SK', 'ALIYUN')
    assert settings.topic == 'TBW102'
    assert settings.group == 'mine'


def test_from_environment_half_credentials():
    with pytest.raises(ConfigurationError):
        Settings.from_environment({'BROKERWIRE_ACCESS_KEY': 'AK'})


def test_parse_endpoints():
    parsed = parse_endpoints('10.0.0.1:9876; 10.0.0.2:9877,host3')
    assert parsed == [('10.0.0.1', 9876), ('10.0.0.2', 9877), ('host3', 9876)]

    assert parse_endpoints(['tcp://a:1', ('b', '2')]) == [('a', 1), ('b', 2)]
    assert parse_endpoints(None) == []
    assert parse_endpoints('') == []

    with pytest.raises(ConfigurationError):
        parse_endpoints('a:port')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
