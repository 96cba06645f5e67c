""" Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`. The bridge
    only uses this to parse configuration files and to check whether an
    inbound frame is well-formed JSON, but both happen often enough (once per
    frame, in the latter case) that the choice of library matters.

    :data:`DecodeError` is the exception raised by :func:`loads` and
    :func:`parse` when the input is not valid JSON, regardless of which
    library is doing the work. The frame validator depends on it: malformed
    input is an ordinary, expected outcome there, and has to be told apart
    from a genuine failure without knowing which library is in use.

    :func:`parse` is :func:`loads` tuned for checking well-formedness rather
    than using the result: numbers are kept as :class:`decimal.Decimal`
    where the library allows it, so a legal but out-of-range literal such as
    ``1e400`` parses instead of raising.
"""

# The business about conditionally importing the libraries is intended to
# avoid importing less efficient libraries if they are not available.

import decimal

msgspec = None
orjson = None
json = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    try:
        import orjson
    except ImportError:
        pass

if msgspec is None and orjson is None:
    import json


# The msgspec 'encode' operation returns bytes, as does orjson.dumps. To
# maintain alignment all 'dumps' methods need to do so as well.

def json_dumps(*args, **kwargs):
    return json.dumps(*args, **kwargs).encode()


if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
    parse = msgspec.json.Decoder(float_hook=decimal.Decimal).decode
    DecodeError = msgspec.DecodeError
    backend = 'msgspec'
elif orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    parse = orjson.loads
    DecodeError = orjson.JSONDecodeError
    backend = 'orjson'
else:
    dumps = json_dumps
    loads = json.loads

    def parse(data):
        return json.loads(data, parse_float=decimal.Decimal)

    # Covers JSONDecodeError and the UnicodeDecodeError raised for bytes
    # that are not valid UTF-8.
    DecodeError = ValueError
    backend = 'json'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
