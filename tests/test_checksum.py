from minnow.checksum import InternetChecksum


def _checksum(*pieces):
    c = InternetChecksum()
    for piece in pieces:
        c.add(piece)
    return c.value()


def test_empty_checksum():
    assert InternetChecksum().value() == 0xFFFF


def test_worked_example():
    assert _checksum(bytes([0x00, 0x01, 0xF2, 0x03, 0xF4, 0xF5, 0xF6, 0xF7])) == 0x220D


def test_split_at_odd_offset_matches_whole():
    data = b"the quick brown fox jumps"
    whole = _checksum(data)
    for cut in range(len(data) + 1):
        assert _checksum(data[:cut], data[cut:]) == whole


def test_list_of_buffers_matches_concatenation():
    pieces = [b"abc", b"", b"defg", b"h"]
    c = InternetChecksum()
    c.add(pieces)
    assert c.value() == _checksum(b"".join(pieces))


def test_appending_checksum_verifies_to_zero():
    data = b"\x45\x00\x00\x1c\x12\x34\x40\x00\x40\x06"
    cksum = _checksum(data)
    assert _checksum(data, cksum.to_bytes(2, "big")) == 0


def test_initial_sum_is_included():
    c = InternetChecksum(0x1234)
    c.add(b"\x00\x00")
    assert c.value() == _checksum(b"\x12\x34")