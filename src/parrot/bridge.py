""" The :class:`Bridge` ties the pieces together: a
    :class:`parrot.listener.Listener` accepting TCP connections, a
    :class:`parrot.connection.Handler` for each one, and the single
    :class:`parrot.publish.Server` they all publish through. The
    :func:`main` function is the entry point for the ``parrotd`` command.
"""

import argparse
import logging
import signal
import sys

from . import config
from . import connection
from . import listener
from . import publish
from . import validate
from .base import BindError, ConfigurationError

logger = logging.getLogger(__name__)

log_format = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class Bridge:
    """ Bind the TCP listener and the PUB socket described by the supplied
        :class:`parrot.config.Configuration`. Either endpoint failing to
        bind raises a :class:`parrot.base.BindError`, and nothing is left
        bound. Call :func:`run` (or :func:`start`) to begin accepting
        connections.
    """

    def __init__(self, configuration):

        self.config = configuration
        self.validator = validate.get(configuration.validator)

        address = configuration.tcp_address
        port = configuration.tcp_port

        self.listener = listener.Listener(address, port, self.handler)
        logger.info('TCP listener bound to %s:%d', address, self.listener.port)

        try:
            self.pub = publish.Server(configuration.pubsub_endpoint)
        except BindError:
            self.listener.stop()
            raise

        logger.info('PUB socket bound to %s, topic %r', self.pub.endpoint, configuration.topic)


    def handler(self, sock, address):
        """ Factory for the per-connection :class:`parrot.connection.Handler`.
        """

        config = self.config

        return connection.Handler(sock, address, self.pub, self.validator,
                                  config.topic, config.delimiter_byte,
                                  config.max_frame_length)


    @property
    def port(self):
        return self.listener.port


    def run(self):
        """ Accept connections until :func:`stop` is invoked.
        """

        self.listener.run()


    def start(self):
        """ Accept connections in a background thread.
        """

        self.listener.start()


    def stop(self):
        """ Stop accepting connections, close any open connections, and
            flush and close the PUB socket.
        """

        self.listener.stop()
        self.pub.close()


# end of class Bridge



def setup_logging(level='INFO'):
    """ Direct log messages to stderr at the requested *level*.
    """

    root = logging.getLogger()

    if root.handlers:
        pass
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(log_format))
        root.addHandler(handler)

    root.setLevel(str(level).upper())



def parse_arguments(argv=None):

    parser = argparse.ArgumentParser(prog='parrotd',
        description='Republish delimited TCP messages on a ZeroMQ PUB socket.')

    parser.add_argument('-c', '--config', default=None,
        help='JSON configuration file, applied after default.json and local.json')
    parser.add_argument('--tcp', dest='tcp_endpoint', default=None,
        help='TCP host:port to accept connections on')
    parser.add_argument('--delimiter', dest='delimiter_byte', type=int, default=None,
        help='integer value (0-255) of the byte terminating each message')
    parser.add_argument('--pub', dest='pubsub_endpoint', default=None,
        help='ZeroMQ endpoint for the PUB socket, such as tcp://*:2007')
    parser.add_argument('--topic', default=None,
        help='topic every message is published under')
    parser.add_argument('--max-length', dest='max_frame_length', type=int, default=None,
        help='drop messages longer than this many bytes')
    parser.add_argument('--validator', default=None,
        choices=sorted(validate.validators),
        help='validation applied to each message before publishing')
    parser.add_argument('--log-level', dest='log_level', default=None,
        help='logging level, such as DEBUG or INFO')

    return parser.parse_args(argv)



def main(argv=None):
    """ Run the bridge until interrupted. Returns the process exit code:
        zero after a graceful shutdown, one if the bridge could not start.
    """

    arguments = parse_arguments(argv)

    # The requested level is not known to be valid until the configuration
    # is checked; start with the default so errors get reported.

    setup_logging(config.defaults['log_level'])

    overrides = vars(arguments)
    filename = overrides.pop('config')

    try:
        configuration = config.load(filename, overrides)
    except ConfigurationError as e:
        logger.critical('configuration error: %s', e)
        return 1

    setup_logging(configuration.log_level)
    logger.info('%r', configuration)

    try:
        bridge = Bridge(configuration)
    except BindError as e:
        logger.critical('%s', e)
        return 1

    def shutdown(signum, frame):
        logger.info('received %s, shutting down', signal.Signals(signum).name)
        bridge.listener.stop()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        bridge.run()
    finally:
        bridge.stop()

    return 0



if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
