"""Tests for the SLIP encoder."""

import array

import pytest

from serial_line_ip.protocol.encoder import (
    Encoder,
    EncodeTotals,
    encode,
    encoded_size,
    max_encoded_size,
)
from serial_line_ip.protocol.errors import CapacityExceeded
from serial_line_ip.protocol.markers import END, ESC, ESC_END, ESC_ESC


def _encode(payload: bytes) -> bytes:
    out = bytearray(max_encoded_size(len(payload)))
    n = encode(payload, out)
    return bytes(out[:n])


def test_marker_values():
    """Marker bytes are the RFC 1055 values and all distinct."""
    assert (END, ESC, ESC_END, ESC_ESC) == (0xC0, 0xDB, 0xDC, 0xDD)
    assert len({END, ESC, ESC_END, ESC_ESC}) == 4


def test_encode_empty():
    """An empty payload is a lone END."""
    assert _encode(b"") == bytes([END])


def test_encode_plain_bytes():
    """Bytes other than END and ESC pass through unchanged."""
    assert _encode(b"\x01\x02\x03") == b"\x01\x02\x03\xC0"


def test_encode_single_end():
    """A literal END becomes ESC ESC_END."""
    assert _encode(bytes([0xC0])) == bytes([0xDB, 0xDC, 0xC0])


def test_encode_single_esc():
    """A literal ESC becomes ESC ESC_ESC."""
    assert _encode(bytes([0xDB])) == bytes([0xDB, 0xDD, 0xC0])


def test_encode_mixed():
    """Escapes are applied per byte, left to right."""
    assert _encode(bytes([0x01, 0xC0, 0xDB, 0x02])) == bytes(
        [0x01, 0xDB, 0xDC, 0xDB, 0xDD, 0x02, 0xC0]
    )


def test_encode_escape_codes_are_not_escaped():
    """ESC_END and ESC_ESC on their own are ordinary data."""
    assert _encode(bytes([ESC_END, ESC_ESC])) == bytes([ESC_END, ESC_ESC, END])


def test_encode_returns_count():
    """The return value is the number of bytes written."""
    out = bytearray(32)
    n = encode(b"\xC0\x01", out)
    assert n == 4
    assert out[:n] == b"\xDB\xDC\x01\xC0"


def test_encode_into_memoryview_slice():
    """Writing into a slice of a larger buffer leaves the rest untouched."""
    out = bytearray(b"\xAA" * 8)
    n = encode(b"\x05", memoryview(out)[2:])
    assert n == 2
    assert out == b"\xAA\xAA\x05\xC0\xAA\xAA\xAA\xAA"


def test_encode_into_array():
    """Any writable buffer-protocol object is accepted."""
    out = array.array("B", bytes(4))
    n = encode(b"\xDB", out)
    assert out.tobytes()[:n] == b"\xDB\xDD\xC0"


def test_encode_read_only_buffer():
    """A read-only output buffer is rejected."""
    with pytest.raises(TypeError):
        encode(b"\x01", bytes(8))


def test_encoded_size():
    """encoded_size counts one extra byte per END/ESC plus the terminator."""
    assert encoded_size(b"") == 1
    assert encoded_size(b"\x01\x02") == 3
    assert encoded_size(b"\xC0\xDB\x01") == 6


def test_max_encoded_size():
    """Worst case doubles every byte."""
    assert max_encoded_size(0) == 1
    assert max_encoded_size(10) == 21
    with pytest.raises(ValueError):
        max_encoded_size(-1)


@pytest.mark.parametrize(
    "payload",
    [b"", b"\x01\x02\x03", b"\xC0\xC0", b"\xDB\x00\xC0", bytes(range(256))],
)
def test_encode_exact_capacity(payload):
    """A buffer exactly encoded_size() long is enough; one byte less is not."""
    size = encoded_size(payload)
    assert encode(payload, bytearray(size)) == size

    short = bytearray(size - 1)
    with pytest.raises(CapacityExceeded) as info:
        encode(payload, short)
    assert info.value.required == size
    assert info.value.available == size - 1


def test_encode_failure_writes_nothing():
    """A failed encode leaves the output buffer untouched."""
    out = bytearray(b"\x55" * 4)
    with pytest.raises(CapacityExceeded):
        encode(b"\xC0\xC0\xC0", out)
    assert out == b"\x55" * 4


def test_encode_totals_add():
    """Totals accumulate with + and +=."""
    totals = EncodeTotals(read=1, written=2)
    totals += EncodeTotals(read=3, written=4)
    assert totals == EncodeTotals(read=4, written=6)


def test_encoder_single_call_matches_encode():
    """encode() followed by finish() produces the same frame as encode()."""
    payload = b"\x01\xC0\x02\xDB\x03"
    out = bytearray(32)
    enc = Encoder()
    totals = enc.encode(payload, out)
    totals += enc.finish(memoryview(out)[totals.written:])
    assert totals.read == len(payload)
    assert bytes(out[: totals.written]) == _encode(payload)


def test_encoder_leading_end():
    """With leading_end the frame starts with a flushing END."""
    out = bytearray(32)
    enc = Encoder(leading_end=True)
    totals = enc.encode(b"\x01", out)
    assert totals == EncodeTotals(read=1, written=2)
    totals += enc.finish(memoryview(out)[totals.written:])
    assert bytes(out[: totals.written]) == b"\xC0\x01\xC0"


def test_encoder_empty_with_leading_end():
    """finish() alone still writes both END bytes."""
    out = bytearray(4)
    enc = Encoder(leading_end=True)
    totals = enc.finish(out)
    assert totals.written == 2
    assert out[:2] == b"\xC0\xC0"


def test_encoder_multi_part():
    """Several chunks form a single frame."""
    parts = [b"\x01\x02\x03\xDB", b"\x05\xC0\x07\x08", b"\x09\x0A\xDB\x0C"]
    out = bytearray(32)
    enc = Encoder(leading_end=True)
    totals = EncodeTotals()
    for part in parts:
        step = enc.encode(part, memoryview(out)[totals.written:])
        assert step.read == len(part)
        totals += step
    totals += enc.finish(memoryview(out)[totals.written:])

    expected = bytes([
        0xC0, 0x01, 0x02, 0x03, ESC, ESC_ESC, 0x05, ESC, ESC_END, 0x07, 0x08,
        0x09, 0x0A, ESC, ESC_ESC, 0x0C, 0xC0,
    ])
    assert bytes(out[: totals.written]) == expected


def test_encoder_partial_progress():
    """A short buffer yields partial progress without splitting an escape."""
    enc = Encoder()
    out = bytearray(2)
    totals = enc.encode(b"\x01\xC0\x02", out)
    assert totals == EncodeTotals(read=1, written=1)
    assert out[:1] == b"\x01"

    out2 = bytearray(8)
    step = enc.encode(b"\xC0\x02", out2)
    assert step == EncodeTotals(read=2, written=3)
    assert out2[:3] == b"\xDB\xDC\x02"


def test_encoder_header_without_room():
    """A pending leading END with no room raises."""
    enc = Encoder(leading_end=True)
    with pytest.raises(CapacityExceeded):
        enc.encode(b"\x01", bytearray(0))
    assert not enc.started


def test_encoder_finish_without_room():
    """finish() into an empty buffer raises and keeps the packet open."""
    enc = Encoder()
    enc.encode(b"\x01", bytearray(4))
    with pytest.raises(CapacityExceeded):
        enc.finish(bytearray(0))
    assert enc.started
    assert enc.finish(bytearray(1)).written == 1


def test_encoder_reusable_after_finish():
    """The encoder starts a fresh packet after finish()."""
    enc = Encoder(leading_end=True)
    out = bytearray(8)
    enc.encode(b"\x01", out)
    enc.finish(out)
    assert not enc.started
    totals = enc.encode(b"\x02", out)
    assert out[: totals.written] == b"\xC0\x02"


def test_encoded_size_accepts_buffers():
    """encoded_size works on any bytes-like object."""
    data = bytearray(b"\x01\xC0\xDB")
    assert encoded_size(data) == 6
    assert encoded_size(memoryview(data)) == 6
    assert encoded_size(memoryview(data)[1:]) == 5
