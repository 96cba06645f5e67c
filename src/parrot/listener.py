""" The :class:`Listener` accepts inbound TCP connections and starts a
    dedicated thread for each one. The per-connection work is done by
    whatever the *factory* returns, normally a
    :class:`parrot.connection.Handler`.
"""

import logging
import socket
import threading
import time

from .base import BindError

logger = logging.getLogger(__name__)


class Listener:
    """ Bind a TCP listening socket to *address* and *port*, and accept
        connections until :func:`stop` is invoked. A *port* of zero will
        bind to an ephemeral port; the port actually bound is available as
        :attr:`port`. The socket is bound immediately; failure to do so
        raises a :class:`parrot.base.BindError`.

        For each accepted connection ``factory(sock, address)`` is invoked,
        and the ``run()`` method of the returned object is called in a new
        background thread. The object must also provide a ``stop()`` method,
        which is invoked when the :class:`Listener` is shut down.

        :ivar port: The port on which this listener is accepting connections.
        :ivar handlers: The set of handlers whose connections are still open.
    """

    backlog = 128

    # Seconds. The accept loop wakes up this often to check whether it
    # should exit; it also governs the pause after a failed accept().

    interval = 0.5

    def __init__(self, address, port, factory):

        self.address = address
        self.factory = factory

        if ':' in address:
            family = socket.AF_INET6
        else:
            family = socket.AF_INET

        try:
            self.socket = socket.create_server((address, int(port)), family=family, backlog=self.backlog)
        except OSError as e:
            raise BindError('cannot listen on %s:%s: %s' % (address, port, e)) from e

        self.socket.settimeout(self.interval)
        self.port = self.socket.getsockname()[1]

        self.handlers = set()
        self.handlers_lock = threading.Lock()
        self.shutdown = False
        self.thread = None


    def run(self):
        """ Accept connections until :func:`stop` is invoked.
        """

        logger.info('accepting TCP connections on %s:%d', self.address, self.port)

        while self.shutdown == False:
            try:
                sock, address = self.socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.shutdown == True:
                    break

                # Typically resource exhaustion (too many open files) or
                # a connection aborted before it could be accepted.

                logger.error('TCP connection accept failed: %s', e)
                time.sleep(self.interval)
                continue

            self._spawn(sock, address)

        logger.debug('no longer accepting TCP connections on port %d', self.port)


    def _spawn(self, sock, address):

        logger.debug('TCP client connected from %s', address)

        handler = self.factory(sock, address)

        with self.handlers_lock:
            self.handlers.add(handler)

        thread = threading.Thread(target=self._serve, args=(handler,))
        thread.daemon = True
        thread.start()


    def _serve(self, handler):

        try:
            handler.run()
        except Exception:
            logger.exception('%r: connection handler failed', handler)
        finally:
            with self.handlers_lock:
                self.handlers.discard(handler)


    def start(self):
        """ Invoke :func:`run` in a background thread.
        """

        self.thread = threading.Thread(target=self.run, name='listener')
        self.thread.daemon = True
        self.thread.start()


    def stop(self):
        """ Stop accepting connections, and close any that remain open.
        """

        if self.shutdown == True:
            return

        self.shutdown = True

        if self.thread is not None and self.thread is not threading.current_thread():
            self.thread.join(self.interval * 4)

        self.socket.close()

        with self.handlers_lock:
            handlers = list(self.handlers)

        for handler in handlers:
            handler.stop()


# end of class Listener


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
