""" Background polling, used to refresh topic routes from the name servers
    on a fixed cadence. One thread per polled method; the method is only
    weakly referenced, polling ends on its own once the owner is gone.
"""

import logging
import threading
import time
import weakref

logger = logging.getLogger(__name__)

active = dict()
active_lock = threading.Lock()


def ref(thing):
    """ Return a weak reference to the supplied argument, regardless of
        whether it is a simple function or a bound method.
    """

    try:
        thing.__func__
        thing.__self__
    except AttributeError:
        return weakref.ref(thing)
    else:
        return weakref.WeakMethod(thing)



def period(method):
    """ Return the currently set polling period for the provided *method*.
        Returns None if no polling is presently active for that method.
    """

    try:
        poller = active[_key(method)]
    except KeyError:
        return None

    return poller.interval



def start(method, period):
    """ Call the provided *method* every *period* seconds, on a dedicated
        background thread. If a poller is already active for *method* its
        period is updated instead; a period of zero or None stops polling.
    """

    if period is None or period == 0:
        stop(method)
        return

    key = _key(method)

    with active_lock:
        poller = active.get(key)

        if poller is None or poller.shutdown:
            poller = _Poller(method, key)
            active[key] = poller

    poller.period(period)



def stop(method):
    """ Discontinue calling the provided *method*.
    """

    try:
        poller = active[_key(method)]
    except KeyError:
        return

    poller.stop()



def _key(method):
    """ Bound methods are created anew on every attribute access, so their
        identity is the pair of the instance and the function.
    """

    try:
        return (id(method.__self__), id(method.__func__))
    except AttributeError:
        return id(method)



class _Poller:
    """ Background thread to invoke any polling requests.
    """

    def __init__(self, method, key):

        self.key = key
        self.interval = None
        self.reference = ref(method)
        self.shutdown = False

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def period(self, period):
        """ Update the polling interval to *period* seconds.
        """

        period = float(period)
        self.interval = period
        self.wake()


    def run(self):

        interval = 30
        next = time.time()

        # Initial wait for someone to call self.period().

        while self.interval is None and self.shutdown == False:
            self.alarm.wait(1)

        while True:
            begin = time.time()

            if self.shutdown == True:
                break

            if self.alarm.is_set() == True:
                self.alarm.clear()

                # A new interval starts an entirely new cadence; the first
                # call happens one full interval from now.

                interval = self.interval
                next = begin + interval

            else:
                next += interval

                method = self.reference()

                if method is None:
                    # The referenced object is gone. No further calls are possible.
                    break

                try:
                    method()
                except Exception:
                    logger.exception('polled method %r failed', method)

                del method

            end = time.time()

            delay = next - end
            if delay > 0:
                self.alarm.wait(delay)


        # Infinite loop exited.

        with active_lock:
            if active.get(self.key) is self:
                del active[self.key]


    def stop(self):
        self.shutdown = True
        self.wake()


    def wake(self):
        self.alarm.set()


# end of class _Poller


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
