""" Python implementation of parrot, a bridge that accepts delimited messages
    over TCP and republishes each complete message on a ZeroMQ PUB socket
    under a fixed topic.
"""

# Utility components.

from . import base
from . import json

# Submodules used by multiple other components.

from . import config
from . import framing
from . import validate
from . import publish

# Primary public-facing interfaces.

from .connection import Handler
from .listener import Listener
from .bridge import Bridge
from .producer import Producer

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
