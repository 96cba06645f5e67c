import random
import pytest

import parrot


BEL = 7


def feed_in_chunks(data, sizes, delimiter=BEL, max_length=None):
    """ Feed *data* to a new Splitter, broken into chunks of the given
        *sizes* (cycled as needed). Returns the splitter and the frames.
    """

    splitter = parrot.framing.Splitter(delimiter, max_length)
    frames = list()
    offset = 0
    index = 0

    while offset < len(data):
        size = sizes[index % len(sizes)]
        index += 1
        frames.extend(splitter.feed(data[offset:offset + size]))
        offset += size

    return splitter, frames


def test_scenario_a():
    splitter = parrot.framing.Splitter(BEL)
    frames = splitter.feed(b'ab\x07cd\x07')
    assert frames == [b'ab', b'cd']
    assert splitter.pending == 0


def test_scenario_b_empty_frames():
    splitter = parrot.framing.Splitter(BEL)
    frames = splitter.feed(b'\x07\x07')
    assert frames == [b'', b'']


def test_leading_and_adjacent_delimiters():
    splitter = parrot.framing.Splitter(BEL)
    frames = splitter.feed(b'\x07a\x07\x07b\x07')
    assert frames == [b'', b'a', b'', b'b']


def test_scenario_c_unterminated_tail():
    splitter = parrot.framing.Splitter(BEL)
    frames = splitter.feed(b'partial')
    assert frames == []
    assert splitter.pending == 7

    tail = splitter.close()
    assert tail == b'partial'
    assert splitter.pending == 0

    # The splitter starts fresh after close(); the old tail is gone.

    frames = splitter.feed(b'next\x07')
    assert frames == [b'next']


def test_scenario_d_chunk_boundaries():
    splitter = parrot.framing.Splitter(BEL)
    frames = splitter.feed(b'ab')
    assert frames == []

    frames = splitter.feed(b'\x07cd\x07')
    assert frames == [b'ab', b'cd']


def test_frame_spanning_many_chunks():
    splitter = parrot.framing.Splitter(BEL)

    for byte in b'hello world':
        assert splitter.feed(bytes((byte,))) == []

    assert splitter.feed(b'\x07') == [b'hello world']


def test_empty_chunk():
    splitter = parrot.framing.Splitter(BEL)
    assert splitter.feed(b'') == []
    splitter.feed(b'abc')
    assert splitter.feed(b'') == []
    assert splitter.feed(b'\x07') == [b'abc']


def test_chunk_invariance():
    """ However the stream is chunked, the same frames come out.
    """

    generator = random.Random(1974)
    alphabet = b'ab{}":\x07\x07\x00\xff'

    for trial in range(50):
        length = generator.randint(0, 400)
        data = bytes(generator.choice(alphabet) for i in range(length))

        expected = data.split(b'\x07')[:-1]

        single, frames = feed_in_chunks(data, [len(data) or 1])
        assert frames == expected

        bytewise, frames = feed_in_chunks(data, [1])
        assert frames == expected

        sizes = [generator.randint(1, 17) for i in range(10)]
        mixed, frames = feed_in_chunks(data, sizes)
        assert frames == expected

        assert single.pending == bytewise.pending == mixed.pending


def test_resplitting_reproduces_input():
    data = b'{"a": 1}\x07\x07{"b": 2}\x07tail'

    splitter, frames = feed_in_chunks(data, [3])
    tail = splitter.close()

    rebuilt = b''.join(frame + b'\x07' for frame in frames)
    assert rebuilt + tail == data
    assert tail == b'tail'


def test_alternate_delimiter():
    splitter = parrot.framing.Splitter(ord('\n'))
    assert splitter.feed(b'one\ntwo\x07three\n') == [b'one', b'two\x07three']


def test_stateless_split():
    buffer, frames = parrot.framing.split(b'', b'ab', BEL)
    assert buffer == b'ab'
    assert frames == []

    buffer, frames = parrot.framing.split(buffer, b'\x07cd\x07ef', BEL)
    assert buffer == b'ef'
    assert frames == [b'ab', b'cd']


def test_invalid_delimiter():

    with pytest.raises(ValueError):
        parrot.framing.Splitter(256)

    with pytest.raises(ValueError):
        parrot.framing.Splitter(-1)

    with pytest.raises(TypeError):
        parrot.framing.Splitter(True)

    with pytest.raises(ValueError):
        parrot.framing.Splitter(BEL, max_length=0)


def test_encode():
    assert parrot.framing.encode(b'abc') == b'abc\x07'
    assert parrot.framing.encode('abc', ord('\n')) == b'abc\n'
    assert parrot.framing.encode(b'') == b'\x07'

    splitter = parrot.framing.Splitter(0)
    assert splitter.encode(b'abc') == b'abc\x00'

    with pytest.raises(ValueError):
        parrot.framing.encode(b'a\x07b')


def test_max_length_complete_frame():
    """ A frame over the limit is dropped even when it arrives complete;
        its neighbors are unaffected.
    """

    splitter = parrot.framing.Splitter(BEL, max_length=4)
    frames = splitter.feed(b'abcd\x07abcde\x07xy\x07')
    assert frames == [b'abcd', b'xy']
    assert splitter.overflows == 1


def test_max_length_discards_until_delimiter():
    splitter = parrot.framing.Splitter(BEL, max_length=4)

    assert splitter.feed(b'ok\x07abc') == [b'ok']
    assert splitter.overflows == 0

    # Exceeds the limit with no delimiter in sight.

    assert splitter.feed(b'defgh') == []
    assert splitter.overflows == 1
    assert splitter.pending == 0

    # Still part of the oversized frame; discarded without buffering.

    assert splitter.feed(b'ijklmnop') == []
    assert splitter.pending == 0
    assert splitter.overflows == 1

    # The delimiter ends the oversized frame, and normal service resumes.

    assert splitter.feed(b'qrs\x07fine\x07') == [b'fine']
    assert splitter.overflows == 1


def test_max_length_bytewise():
    data = b'abc\x07toolong\x07\x07xyz\x07'

    splitter, frames = feed_in_chunks(data, [1], max_length=3)
    assert frames == [b'abc', b'', b'xyz']
    assert splitter.overflows == 1

    splitter, frames = feed_in_chunks(data, [len(data)], max_length=3)
    assert frames == [b'abc', b'', b'xyz']
    assert splitter.overflows == 1


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
