from dataclasses import dataclass

from minnow.parser import Parser, Serializer, parse, serialize


def test_integer_round_trip_across_sizes():
    s = Serializer()
    s.integer(0xAB, 1)
    s.integer(0x1234, 2)
    s.integer(0xDEADBEEF, 4)
    s.integer(0x0102030405060708, 8)
    p = Parser(s.output())
    assert p.integer(1) == 0xAB
    assert p.integer(2) == 0x1234
    assert p.integer(4) == 0xDEADBEEF
    assert p.integer(8) == 0x0102030405060708
    assert not p.has_error
    assert p.remaining == 0


def test_serializer_writes_big_endian():
    s = Serializer()
    s.integer(0x0800, 2)
    assert b"".join(s.output()) == b"\x08\x00"


def test_serializer_truncates_high_bits():
    s = Serializer()
    s.integer(0x1FF, 1)
    out = b"".join(s.output())
    p = Parser([out])
    assert p.integer(1) == 0xFF
    assert len(out) == 1


def test_integer_spans_buffers():
    s = Serializer()
    s.integer(0xCAFEBABE, 4)
    whole = b"".join(s.output())
    p = Parser([whole[:1], whole[1:3], whole[3:]])
    assert p.integer(4) == 0xCAFEBABE


def test_short_input_sets_error_and_stays_set():
    p = Parser([b"\x01"])
    assert p.integer(2) == 0
    assert p.has_error
    assert p.integer(1) == 0
    assert p.remaining == 1


def test_set_error():
    p = Parser([b"abc"])
    p.set_error()
    assert p.has_error
    assert p.string(1) == b""


def test_string_reads_across_buffers():
    p = Parser([b"ab", b"", b"cd", b"e"])
    assert p.string(4) == b"abcd"
    assert p.remaining == 1
    assert p.string(2) == b""
    assert p.has_error


def test_remove_prefix_then_all_remaining():
    p = Parser([b"hello", b"world"])
    p.remove_prefix(3)
    assert p.all_remaining() == [b"lo", b"world"]
    assert p.remaining == 0
    assert p.all_remaining() == []


def test_remove_prefix_past_end_consumes_everything():
    p = Parser([b"abc"])
    p.remove_prefix(100)
    assert p.remaining == 0
    assert not p.has_error


def test_all_remaining_joined():
    p = Parser([b"xy", b"z"])
    p.remove_prefix(1)
    assert p.all_remaining_joined() == b"yz"


def test_parser_accepts_single_bytes():
    p = Parser(b"\x00\x07")
    assert p.integer(2) == 7


def test_serializer_buffer_layout():
    s = Serializer()
    s.integer(1, 1)
    s.buffer(b"xy")
    assert s.output() == [b"\x01", b"xy", b""]


def test_serializer_buffer_list():
    s = Serializer()
    s.buffer([b"a", b"bc"])
    assert b"".join(s.output()) == b"abc"


def test_serializer_initial_buffer():
    s = Serializer(b"pre")
    s.integer(0x41, 1)
    assert b"".join(s.output()) == b"preA"


@dataclass
class _Pair:
    first: int = 0
    second: int = 0

    def parse(self, parser):
        self.first = parser.integer(2)
        self.second = parser.integer(4)

    def serialize(self, serializer):
        serializer.integer(self.first, 2)
        serializer.integer(self.second, 4)


def test_helpers_round_trip():
    original = _Pair(513, 70000)
    buffers = serialize(original)
    copy = _Pair()
    assert parse(copy, buffers)
    assert copy == original


def test_parse_helper_reports_failure():
    copy = _Pair()
    assert not parse(copy, [b"\x00\x01\x02"])