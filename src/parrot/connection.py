""" The :class:`Handler` owns the read loop for a single accepted TCP
    connection: bytes are read from the socket, fed through a
    :class:`parrot.framing.Splitter`, and each completed frame is validated
    and then published. Frames are published in the order their delimiters
    arrived; a frame that fails validation is dropped, and the connection
    carries on as if it had never arrived.

    Nothing is shared between handlers except the publisher.
"""

import logging
import socket
import threading
import zmq

from . import framing
from .base import PublishError

logger = logging.getLogger(__name__)

# Invalid frames are untrusted input; only this many bytes of one will
# appear in a log message.

preview_length = 32


def preview(frame):
    """ Return a short, printable representation of *frame* suitable for
        logging.
    """

    if len(frame) > preview_length:
        return repr(frame[:preview_length]) + '...'
    else:
        return repr(frame)



class Handler:
    """ Read loop for the connected *sock*, where *address* is the peer
        address as returned by :func:`socket.socket.accept`. Validated
        frames are handed to :func:`publisher.publish` under *topic*; the
        *validator* is any :class:`parrot.base.Validator`. The *delimiter*
        and *max_length* are passed through to the
        :class:`parrot.framing.Splitter`.

        :func:`run` does not return until the connection closes.

        :ivar frames: Count of completed frames, valid or otherwise.
        :ivar published: Count of frames handed to the publisher.
        :ivar rejected: Count of frames that failed validation.
        :ivar dropped: Count of frames dropped for exceeding *max_length*.
        :ivar failed: Count of valid frames the publisher refused.
        :ivar bytes: Count of bytes received.
    """

    chunk_size = 65536

    def __init__(self, sock, address, publisher, validator, topic,
                        delimiter=framing.default_delimiter, max_length=None):

        self.socket = sock
        self.address = address
        self.publisher = publisher
        self.validator = validator
        self.topic = topic
        self.splitter = framing.Splitter(delimiter, max_length)

        self.frames = 0
        self.published = 0
        self.rejected = 0
        self.dropped = 0
        self.failed = 0
        self.bytes = 0

        self.closed = threading.Event()


    def __repr__(self):
        return 'Handler(%s)' % (format_address(self.address))


    def run(self):

        logger.debug('%r: connection opened', self)

        try:
            self._read_loop()
        finally:
            self._close()


    def _read_loop(self):

        while True:
            try:
                chunk = self.socket.recv(self.chunk_size)
            except OSError as e:
                logger.info('%r: read failed, closing connection: %s', self, e)
                break

            if len(chunk) == 0:
                break

            self.bytes += len(chunk)
            self.receive(chunk)


    def receive(self, chunk):
        """ Process a newly arrived *chunk* of bytes from the connection.
        """

        overflows = self.splitter.overflows
        frames = self.splitter.feed(chunk)
        overflows = self.splitter.overflows - overflows

        if overflows:
            self.dropped += overflows
            logger.warning('%r: dropped %d frame(s) longer than %d bytes',
                            self, overflows, self.splitter.max_length)

        for frame in frames:
            self.handle(frame)


    def handle(self, frame):
        """ Validate and publish one completed *frame*.
        """

        self.frames += 1

        # A validator that fails outright is treated as a rejection; one bad
        # frame must not close the connection.

        try:
            valid = self.validator.validate(frame)
        except Exception:
            logger.warning('%r: validator failed on frame (%d bytes): %s',
                            self, len(frame), preview(frame), exc_info=True)
            valid = False

        if valid:
            pass
        else:
            self.rejected += 1
            logger.debug('%r: dropping invalid frame (%d bytes): %s',
                            self, len(frame), preview(frame))
            return

        try:
            self.publisher.publish(self.topic, frame)
        except (PublishError, zmq.ZMQError) as e:
            self.failed += 1
            logger.error('%r: failed to publish frame (%d bytes): %s',
                            self, len(frame), e)
        else:
            self.published += 1


    def _close(self):

        tail = self.splitter.close()

        if tail:
            logger.debug('%r: discarding %d unterminated bytes', self, len(tail))

        try:
            self.socket.close()
        finally:
            self.closed.set()

        logger.debug('%r: connection closed after %d bytes, %d frames, %d published',
                        self, self.bytes, self.frames, self.published)


    def stop(self):
        """ Shut down the connection from another thread. :func:`run` will
            return once the pending read is interrupted.
        """

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already closed, or never fully connected.
            pass


# end of class Handler



def format_address(address):

    if isinstance(address, tuple) and len(address) >= 2:
        host, port = address[:2]
    else:
        return str(address)

    if ':' in host:
        return '[%s]:%d' % (host, port)
    else:
        return '%s:%d' % (host, port)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
