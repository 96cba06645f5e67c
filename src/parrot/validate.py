""" Validators decide whether a completed frame is fit to publish. A
    :class:`parrot.connection.Handler` calls :func:`Validator.validate` once
    for every frame, including empty frames; a frame that fails validation
    is dropped and never published.
"""

from . import base
from . import json


class JSON(base.Validator):
    """ Accept any frame that parses as a JSON document. An empty frame is
        not a JSON document, and is rejected. So is a document nested too
        deeply for the parser to follow.
    """

    def validate(self, frame):

        try:
            json.parse(frame)
        except (json.DecodeError, RecursionError):
            return False

        return True



class Anything(base.Validator):
    """ Accept every frame, including empty ones.
    """

    def validate(self, frame):
        return True



validators = dict()
validators['json'] = JSON
validators['none'] = Anything


def get(name):
    """ Factory function for a :class:`parrot.base.Validator` instance,
        by the *name* used in the configuration: 'json' or 'none'.
    """

    name = str(name).lower()

    try:
        validator_class = validators[name]
    except KeyError:
        raise ValueError('unknown validator: ' + repr(name))

    return validator_class()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
