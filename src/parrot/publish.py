""" Classes and methods implemented here handle the ZeroMQ publish/subscribe
    side of the bridge. The :class:`Server` is the single publisher shared by
    every TCP connection; the :class:`Client` is a convenience for anyone
    wanting to receive what the bridge publishes.

    Each broadcast is a two-part ZeroMQ message: the topic, encoded as UTF-8,
    followed by the raw frame bytes.
"""

import atexit
import logging
import queue
import threading
import weakref
import zmq

from . import base

logger = logging.getLogger(__name__)

zmq_context = zmq.Context()
servers = weakref.WeakSet()


class Server(base.Publisher):
    """ Send broadcasts via a ZeroMQ PUB socket bound to *endpoint*, for
        example ``tcp://*:2007``. A ZeroMQ wildcard port (``tcp://*:*``) is
        allowed; the endpoint actually bound is available as
        :attr:`endpoint` after construction.

        ZeroMQ sockets are not thread safe. Rather than locking the PUB
        socket, :func:`publish` puts messages on a queue that is drained by a
        single background thread; that thread is the only one that ever
        touches the PUB socket. Messages from any one calling thread are
        sent in the order they were queued.

        :ivar endpoint: The endpoint this server is bound to.
    """

    linger = 100

    def __init__(self, endpoint):

        self.socket = zmq_context.socket(zmq.PUB)
        self.socket.setsockopt(zmq.LINGER, self.linger)

        try:
            self.socket.bind(endpoint)
        except zmq.ZMQError as e:
            self.socket.close()
            raise base.BindError('cannot bind PUB socket to %s: %s' % (endpoint, e)) from e

        self.endpoint = self.socket.getsockopt_string(zmq.LAST_ENDPOINT)
        self.published = 0

        self._queue = queue.SimpleQueue()

        # The PAIR sockets are used to wake up the background thread. The
        # receiving end belongs to the background thread; the sending end is
        # shared by every caller of publish(), and is protected by a lock.

        internal = 'inproc://parrot.publish.Server:signal:%d' % (id(self))
        self._sig_rx = zmq_context.socket(zmq.PAIR)
        self._sig_rx.bind(internal)
        self._sig_tx = zmq_context.socket(zmq.PAIR)
        self._sig_tx.connect(internal)
        self._sig_lock = threading.Lock()

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name='publish')
        self.thread.daemon = True
        self.thread.start()

        servers.add(self)


    def publish(self, topic, payload):
        """ Queue *payload* for broadcast under *topic*. This never blocks
            on the network; the PUB socket itself drops messages for any
            subscriber that cannot keep up.
        """

        try:
            topic.decode
        except AttributeError:
            topic = str(topic)
            topic = topic.encode()

        payload = bytes(payload)

        # The shutdown check and the enqueue happen under the same lock
        # close() uses to set the flag; anything queued here is guaranteed
        # to precede the final flush.

        with self._sig_lock:
            if self.shutdown == True:
                raise base.PublishError('publish server is closed')

            self._queue.put((topic, payload))
            self._sig_tx.send(b'')


    def _send_queued(self):
        """ Send everything currently on the queue. Failures are logged and
            the message dropped; a publish failure must never take down the
            background thread.
        """

        while True:
            try:
                topic, payload = self._queue.get(block=False)
            except queue.Empty:
                break

            try:
                self.socket.send_multipart((topic, payload))
            except zmq.ZMQError:
                logger.exception('failed to publish %d bytes on topic %r', len(payload), topic)
            else:
                self.published += 1


    def run(self):

        poller = zmq.Poller()
        poller.register(self._sig_rx, zmq.POLLIN)

        while self.shutdown == False:
            sockets = poller.poll(1000)
            for active,flag in sockets:
                if self._sig_rx == active:
                    self._sig_rx.recv()
                    self._send_queued()

        # Anything queued before close() was invoked still goes out.

        self._send_queued()
        self._sig_rx.close()
        self.socket.close()


    def close(self, timeout=5):
        """ Stop accepting new messages, flush anything already queued, and
            release the sockets.
        """

        with self._sig_lock:
            if self.shutdown == True:
                return

            self.shutdown = True

            # The background thread stops reading signals once it sees the
            # flag; a full signal queue must not block here. The poll
            # timeout in run() notices the flag regardless.

            try:
                self._sig_tx.send(b'', zmq.NOBLOCK)
            except zmq.Again:
                pass

        self.thread.join(timeout)

        with self._sig_lock:
            self._sig_tx.close()
            self._sig_tx = None


# end of class Server



class Client:
    """ Establish a ZeroMQ SUB connection to the bridge at *endpoint* and
        receive broadcasts. The *topic* is a prefix match, as with any
        ZeroMQ subscription; the default empty topic receives everything.
    """

    def __init__(self, endpoint, topic=''):

        self.endpoint = endpoint
        self.socket = zmq_context.socket(zmq.SUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(endpoint)
        self.subscribe(topic)


    def subscribe(self, topic):

        try:
            topic.decode
        except AttributeError:
            topic = str(topic)
            topic = topic.encode()

        self.socket.setsockopt(zmq.SUBSCRIBE, topic)


    def recv(self, timeout=None):
        """ Return the next broadcast as a (topic, payload) tuple, with the
            topic decoded as a string. If *timeout* (in seconds) is given and
            nothing arrives in that time, return None.
        """

        if timeout is not None:
            ready = self.socket.poll(int(timeout * 1000), zmq.POLLIN)
            if ready == 0:
                return None

        parts = self.socket.recv_multipart()
        topic = parts[0].decode()
        payload = parts[1]

        return topic, payload


    def close(self):
        self.socket.close()


# end of class Client



def shutdown():
    """ Close any servers still running, flushing their queued messages.
    """

    for server in list(servers):
        server.close()


atexit.register(shutdown)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
