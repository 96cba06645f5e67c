""" Configuration handling for the bridge. Configuration is assembled once,
    at startup, from the following sources, each overriding the previous:

    1. the built-in :data:`defaults`;
    2. ``default.json`` in the configuration :func:`directory`, if present;
    3. ``local.json`` in the configuration :func:`directory`, if present;
    4. an explicitly requested configuration file, if any;
    5. explicit overrides, typically from the command line.

    Configuration files are JSON objects using the same option names as
    :data:`defaults`. Unknown options and invalid values raise a
    :class:`parrot.base.ConfigurationError`.
"""

import logging
import os

from . import json
from . import validate
from .base import ConfigurationError


defaults = dict()
defaults['tcp_endpoint'] = '127.0.0.1:1974'
defaults['delimiter_byte'] = 7
defaults['pubsub_endpoint'] = 'tcp://*:2007'
defaults['topic'] = 'parrot'
defaults['max_frame_length'] = None
defaults['validator'] = 'json'
defaults['log_level'] = 'INFO'

filenames = ('default.json', 'local.json')


class Configuration:
    """ A convenience class to represent the bridge configuration. Options
        are available as attributes, or by name as with a dictionary. Any
        keyword arguments are applied as overrides of the :data:`defaults`.
    """

    def __init__(self, **options):

        self._options = dict(defaults)
        self.sources = list()

        if options:
            self.update(options)


    def __contains__(self, name):
        return name in self._options


    def __getitem__(self, name):
        return self._options[name]


    def __getattr__(self, name):

        # Only invoked for names not found the regular way.

        try:
            return self.__dict__['_options'][name]
        except KeyError:
            raise AttributeError(name)


    def __repr__(self):

        options = list()
        for name in sorted(self._options.keys()):
            options.append('%s=%r' % (name, self._options[name]))

        return 'Configuration(' + ', '.join(options) + ')'


    def load(self, filename):
        """ Merge the contents of the JSON file *filename* into this
            configuration.
        """

        filename = str(filename)

        try:
            with open(filename, 'rb') as handle:
                contents = handle.read()
        except OSError as e:
            raise ConfigurationError('cannot read %s: %s' % (filename, e)) from e

        try:
            options = json.loads(contents)
        except json.DecodeError as e:
            raise ConfigurationError('%s is not valid JSON: %s' % (filename, e)) from e

        if isinstance(options, dict):
            pass
        else:
            raise ConfigurationError('%s must contain a JSON object' % (filename))

        self.update(options)
        self.sources.append(filename)


    def update(self, options):
        """ Validate and apply the supplied dictionary of *options*. Either
            all of the options are applied, or none of them are.
        """

        checked = dict()

        for name,value in options.items():
            try:
                checker = checkers[name]
            except KeyError:
                raise ConfigurationError('unknown configuration option: ' + repr(name))

            try:
                checked[name] = checker(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError('invalid %s: %s' % (name, e)) from e

        self._options.update(checked)


    @property
    def tcp_address(self):
        return split_endpoint(self.tcp_endpoint)[0]


    @property
    def tcp_port(self):
        return split_endpoint(self.tcp_endpoint)[1]


# end of class Configuration



def split_endpoint(endpoint):
    """ Split a 'host:port' string into a (host, port) tuple. An IPv6
        address must be enclosed in brackets, as in '[::1]:1974'.
    """

    host, separator, port = endpoint.rpartition(':')

    if separator == '' or host == '':
        raise ValueError("expected 'host:port', got " + repr(endpoint))

    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]

    port = int(port)

    if port < 0 or port > 65535:
        raise ValueError('port out of range: ' + repr(port))

    return host, port



def _string(value):

    if isinstance(value, str):
        return value

    raise TypeError('expected a string, got ' + repr(value))



def _integer(value):

    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError('expected an integer, got ' + repr(value))

    return value



def check_tcp_endpoint(value):
    value = _string(value)
    split_endpoint(value)
    return value



def check_delimiter_byte(value):
    value = _integer(value)

    if value < 0 or value > 255:
        raise ValueError('must be a single byte (0-255), got ' + repr(value))

    return value



def check_pubsub_endpoint(value):
    value = _string(value)

    if '://' in value:
        pass
    else:
        raise ValueError("expected 'transport://address', got " + repr(value))

    return value



def check_max_frame_length(value):

    if value is None:
        return value

    value = _integer(value)

    if value < 1:
        raise ValueError('must be a positive integer or null, got ' + repr(value))

    return value



def check_validator(value):
    value = _string(value)
    value = value.lower()

    if value in validate.validators:
        pass
    else:
        raise ValueError('expected one of %s, got %r' % (sorted(validate.validators), value))

    return value



def check_log_level(value):
    value = _string(value)
    value = value.upper()

    if isinstance(logging.getLevelName(value), int):
        pass
    else:
        raise ValueError('unknown log level: ' + repr(value))

    return value



checkers = dict()
checkers['tcp_endpoint'] = check_tcp_endpoint
checkers['delimiter_byte'] = check_delimiter_byte
checkers['pubsub_endpoint'] = check_pubsub_endpoint
checkers['topic'] = _string
checkers['max_frame_length'] = check_max_frame_length
checkers['validator'] = check_validator
checkers['log_level'] = check_log_level



def directory(default=None):
    """ Return the directory location where configuration files are loaded
        from. This defaults to ``$HOME/.parrot``, but can be overridden by
        calling this method with a valid path, or by setting the
        ``PARROT_HOME`` environment variable. Returns None if neither
        ``PARROT_HOME`` nor ``HOME`` is set.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        os.environ['PARROT_HOME'] = default

    try:
        return os.environ['PARROT_HOME']
    except KeyError:
        pass

    try:
        home = os.environ['HOME']
    except KeyError:
        return None

    return os.path.join(home, '.parrot')



def load(filename=None, overrides=None):
    """ Return a :class:`Configuration` assembled from the files in the
        configuration :func:`directory`, the optional *filename*, and the
        optional dictionary of *overrides*. Overrides set to None are
        ignored, which allows an :class:`argparse.Namespace` to be passed
        through without filtering out the options that were not specified.
    """

    configuration = Configuration()
    base_dir = directory()

    if base_dir is not None:
        for name in filenames:
            path = os.path.join(base_dir, name)
            if os.path.isfile(path):
                configuration.load(path)

    if filename is not None:
        configuration.load(filename)

    if overrides:
        options = dict()
        for name,value in overrides.items():
            if value is not None:
                options[name] = value

        configuration.update(options)

    return configuration


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
