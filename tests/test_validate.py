import pytest

import parrot


def test_json_accepts_documents():
    validator = parrot.validate.JSON()

    for frame in (b'{}', b'[]', b'{"a": [1, 2, 3]}', b'42', b'"string"', b'null', b' {"padded": true} ',
                  b'1e400', b'[1e400, -1e400]'):
        assert validator.validate(frame) == True
        assert validator(frame) == True


def test_json_rejects_garbage():
    validator = parrot.validate.JSON()

    for frame in (b'', b'not-json', b'{"a": ', b'{}{}', b'\xff\xfe', b'{"a": 1,}'):
        assert validator.validate(frame) == False


def test_json_rejects_deep_nesting():
    validator = parrot.validate.JSON()

    assert validator.validate(b'[' * 100000) == False
    assert validator.validate(b'[' * 100000 + b']' * 100000) == False


def test_anything():
    validator = parrot.validate.Anything()

    for frame in (b'', b'not-json', b'\x00\xff'):
        assert validator.validate(frame) == True


def test_factory():
    assert isinstance(parrot.validate.get('json'), parrot.validate.JSON)
    assert isinstance(parrot.validate.get('JSON'), parrot.validate.JSON)
    assert isinstance(parrot.validate.get('none'), parrot.validate.Anything)

    with pytest.raises(ValueError):
        parrot.validate.get('xml')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
