""" Reconstitute discrete messages from an arbitrarily chunked byte stream.
    A message (a *frame*) is terminated by a single delimiter byte; the
    delimiter is never part of the frame, and there is no escaping mechanism,
    so the delimiter can never appear inside message content.

    Each TCP connection gets its own :class:`Splitter`. Bytes are handed to
    :func:`Splitter.feed` as they arrive, in whatever size the transport
    happened to deliver them; completed frames come back out in the order
    their delimiters appeared in the stream. How the stream was chunked has
    no bearing on the frames produced.
"""

default_delimiter = 7


def _check_delimiter(delimiter):

    if isinstance(delimiter, bool):
        raise TypeError('the delimiter must be an integer, not a boolean')

    delimiter = int(delimiter)

    if delimiter < 0 or delimiter > 255:
        raise ValueError('the delimiter must be a single byte (0-255): ' + repr(delimiter))

    return delimiter



def encode(payload, delimiter=default_delimiter):
    """ Return the bytes a producer should put on the wire for *payload*:
        the payload itself, followed by the delimiter. A payload containing
        the delimiter cannot be represented and raises a :class:`ValueError`.
    """

    delimiter = _check_delimiter(delimiter)

    try:
        payload.decode
    except AttributeError:
        payload = str(payload)
        payload = payload.encode()

    if delimiter in payload:
        raise ValueError('payload contains the delimiter byte %d' % (delimiter))

    return bytes(payload) + bytes((delimiter,))



def split(buffer, chunk, delimiter=default_delimiter):
    """ Stateless variant of :func:`Splitter.feed`. The *buffer* is whatever
        was left over from the previous call (initially empty), and *chunk*
        is the newly received data. Returns a tuple of the updated buffer and
        a list of completed frames.
    """

    delimiter = _check_delimiter(delimiter)

    data = bytes(buffer) + bytes(chunk)
    parts = data.split(bytes((delimiter,)))
    remainder = parts.pop()

    return remainder, parts



class Splitter:
    """ Per-connection frame splitter. The *delimiter* is the integer value
        of the byte terminating each frame.

        If *max_length* is set, any frame longer than *max_length* bytes is
        dropped: the bytes received so far are discarded, as are any further
        bytes up to and including the next delimiter, after which normal
        operation resumes. Each dropped frame increments :attr:`overflows`.
        With no *max_length* the internal buffer grows without bound while
        waiting for a delimiter.

        :ivar overflows: Count of frames dropped for exceeding *max_length*.
    """

    def __init__(self, delimiter=default_delimiter, max_length=None):

        self.delimiter = _check_delimiter(delimiter)

        if max_length is not None:
            max_length = int(max_length)
            if max_length < 1:
                raise ValueError('max_length must be a positive integer')

        self.max_length = max_length
        self.overflows = 0

        self.buffer = bytearray()
        self.discarding = False

        # Index into self.buffer of the first byte not yet examined for a
        # delimiter. Everything in front of it is known to be delimiter-free.

        self.next_index = 0


    def __len__(self):
        return len(self.buffer)


    @property
    def pending(self):
        """ The number of bytes received but not yet resolved into a frame.
        """

        return len(self.buffer)


    def encode(self, payload):
        """ Equivalent to :func:`encode` using this splitter's delimiter.
        """

        return encode(payload, self.delimiter)


    def feed(self, chunk):
        """ Append *chunk* to the buffer and return a list of any frames
            completed as a result. The list may be empty; a frame may be
            empty (two adjacent delimiters, or a delimiter at the very start
            of the stream), and is returned like any other.
        """

        buffer = self.buffer
        buffer += chunk

        frames = list()
        delimiter = self.delimiter
        max_length = self.max_length

        start = 0
        index = buffer.find(delimiter, self.next_index)

        while index != -1:
            if self.discarding:
                # This delimiter terminates a frame that already overflowed.
                self.discarding = False
            elif max_length is not None and index - start > max_length:
                self.overflows += 1
            else:
                frames.append(bytes(buffer[start:index]))

            start = index + 1
            index = buffer.find(delimiter, start)

        if start > 0:
            del buffer[:start]

        if self.discarding:
            buffer.clear()
        elif max_length is not None and len(buffer) > max_length:
            self.overflows += 1
            self.discarding = True
            buffer.clear()

        # Whatever remains has been fully scanned.

        self.next_index = len(buffer)

        return frames


    def close(self):
        """ The stream ended. Whatever remains in the buffer was never
            terminated, and thus is not a frame; it is discarded and returned
            strictly for diagnostic purposes. The splitter is reset and can
            be used for a new stream.
        """

        tail = bytes(self.buffer)

        self.buffer = bytearray()
        self.next_index = 0
        self.discarding = False

        return tail


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
