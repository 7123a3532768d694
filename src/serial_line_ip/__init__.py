"""Serial Line Internet Protocol (RFC 1055) framing codec.

The codec works on caller-owned buffers::

    from serial_line_ip import Decoder, encode

    out = bytearray(64)
    n = encode(b"\x01\xc0", out)

    payload = bytearray(64)
    result = Decoder().decode(out[:n], payload)
    assert result.complete and payload[:result.written] == b"\x01\xc0"
"""

from .protocol import (
    END,
    ESC,
    ESC_END,
    ESC_ESC,
    CapacityExceeded,
    DecodeResult,
    DecodeStatus,
    Decoder,
    DecoderState,
    EncodeTotals,
    Encoder,
    FrameReader,
    InvalidEscapeSequence,
    SlipError,
    build_frame,
    encode,
    encoded_size,
    max_encoded_size,
    parse_frames,
)

__version__ = "0.1.0"
