import time
import brokerwire


class Referenced:
    def __init__(self):
        self.calls = 0

    def a_method(self):
        self.calls += 1


def test_references():
    """ Only one polling entity is active for a given method. Bound methods
        are created anew on every attribute access, so make sure they are
        still matched up with their poller.
    """

    def callback():
        pass

    brokerwire.poll.start(callback, period=1)
    period = brokerwire.poll.period(callback)
    assert period == 1

    referenced = Referenced()
    brokerwire.poll.start(referenced.a_method, period=1)
    period = brokerwire.poll.period(referenced.a_method)
    assert period == 1

    brokerwire.poll.start(referenced.a_method, period=2)
    assert brokerwire.poll.period(referenced.a_method) == 2

    brokerwire.poll.stop(callback)
    brokerwire.poll.stop(referenced.a_method)


def test_basics():

    test_basics.polled = False

    def callback():
        test_basics.polled = True

    brokerwire.poll.start(callback, 0.1)
    time.sleep(0.15)

    assert test_basics.polled == True

    brokerwire.poll.stop(callback)
    time.sleep(0.05)
    test_basics.polled = False
    time.sleep(0.15)

    assert test_basics.polled == False


def test_owner_gone():
    referenced = Referenced()
    key = brokerwire.poll._key(referenced.a_method)
    brokerwire.poll.start(referenced.a_method, 0.05)
    time.sleep(0.12)

    assert referenced.calls >= 1
    assert key in brokerwire.poll.active

    del referenced
    time.sleep(0.12)

    # The poller removes itself once the method can no longer be called.
    assert key not in brokerwire.poll.active


def test_failing_method_keeps_polling():

    test_failing_method_keeps_polling.calls = 0

    def callback():
        test_failing_method_keeps_polling.calls += 1
        raise RuntimeError('route refresh failed')

    brokerwire.poll.start(callback, 0.05)
    time.sleep(0.18)
    brokerwire.poll.stop(callback)

    assert test_failing_method_keeps_polling.calls >= 2


def test_ref():
    referenced = Referenced()

    reference = brokerwire.poll.ref(referenced.a_method)
    assert reference() is not None

    del referenced
    assert reference() is None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
