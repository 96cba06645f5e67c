""" A minimal TCP client for the bridge. This is not used by the bridge
    itself; it exists for the benefit of producers written in Python, and
    for smoke testing a running bridge.
"""

import socket

from . import framing


class Producer:
    """ Connect to the bridge listening at *address* and *port*. Every
        payload passed to :func:`send` is terminated with the *delimiter*
        byte, which must match the delimiter configured for the bridge.
    """

    def __init__(self, address, port, delimiter=framing.default_delimiter, timeout=None):

        self.delimiter = delimiter
        self.socket = socket.create_connection((address, int(port)), timeout)


    def __enter__(self):
        return self


    def __exit__(self, *exception):
        self.close()


    def send(self, payload):
        """ Send a single message. The *payload* must not contain the
            delimiter byte.
        """

        self.socket.sendall(framing.encode(payload, self.delimiter))


    def send_raw(self, data):
        """ Send *data* exactly as provided, with no delimiter appended.
        """

        self.socket.sendall(data)


    def close(self):
        self.socket.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
