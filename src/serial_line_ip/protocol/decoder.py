"""Incremental SLIP decoder.

Stuffed bytes may be fed in chunks of any size, down to one byte per call.
Each call writes payload bytes to the start of the supplied output buffer
and stops right after the first unescaped END, so the caller re-invokes
``decode`` on ``chunk[result.consumed:]`` for the next frame.

State machine::

    IDLE    --ESC-->          ESCAPE
    ESCAPE  --ESC_END/ESC_ESC--> IDLE   (writes END / ESC)
    ESCAPE  --END-->          IDLE, raises InvalidEscapeSequence
    ESCAPE  --other-->        IDLE or DISCARD, raises InvalidEscapeSequence
    DISCARD --END-->          IDLE
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .buffers import WritableBuffer, byte_view, writable_view
from .errors import CapacityExceeded, InvalidEscapeSequence
from .markers import END, ESC, ESC_END, ESC_ESC


class DecoderState(Enum):
    """Where the decoder stands within the byte stream."""

    IDLE = "idle"
    ESCAPE = "escape"
    DISCARD = "discard"


class DecodeStatus(Enum):
    """Whether a decode call reached the end of a frame."""

    FRAME_COMPLETE = "frame_complete"
    FRAME_INCOMPLETE = "frame_incomplete"


@dataclass
class DecodeResult:
    """Outcome of one ``Decoder.decode`` call."""

    status: DecodeStatus
    consumed: int
    written: int

    @property
    def complete(self) -> bool:
        return self.status is DecodeStatus.FRAME_COMPLETE

    def __repr__(self) -> str:
        return (
            f"DecodeResult({self.status.name}, "
            f"consumed={self.consumed}, written={self.written})"
        )


class Decoder:
    """Stateful SLIP decoder for a single byte stream.

    Usage::

        dec = Decoder()
        result = dec.decode(chunk, out)
        if result.complete:
            handle(out[:result.written])
            rest = chunk[result.consumed:]

    One instance per stream. Instances share nothing, so independent streams
    may be decoded on independent threads.
    """

    def __init__(self) -> None:
        self._state = DecoderState.IDLE
        self._frame_length = 0

    @property
    def state(self) -> DecoderState:
        return self._state

    @property
    def frame_length(self) -> int:
        """Payload bytes decoded so far for the frame in progress."""
        return self._frame_length

    def reset(self) -> None:
        """Forget everything about the current stream."""
        self._state = DecoderState.IDLE
        self._frame_length = 0

    def resync(self) -> None:
        """Drop the frame in progress and skip input up to the next END."""
        self._state = DecoderState.DISCARD
        self._frame_length = 0

    def decode(self, chunk: bytes, out: WritableBuffer) -> DecodeResult:
        """Decode ``chunk`` into ``out`` until an END is seen or input runs out.

        Args:
            chunk: Stuffed bytes received from the transport.
            out: Writable buffer for payload bytes, filled from offset 0.

        Returns:
            A ``DecodeResult``. ``consumed`` includes the terminating END when
            the frame is complete; anything after it is left for the next call.

        Raises:
            InvalidEscapeSequence: ESC was followed by something other than
                ESC_END or ESC_ESC. The rest of the corrupted frame has been
                skipped; resume from ``chunk[exc.consumed:]``.
            CapacityExceeded: ``out`` is full and another payload byte is due.
                Resume from ``chunk[exc.consumed:]`` with a fresh buffer.
        """
        view = writable_view(out)
        data = byte_view(chunk)
        capacity = len(view)
        written = 0

        for index, byte in enumerate(data):
            if self._state is DecoderState.DISCARD:
                if byte == END:
                    self._state = DecoderState.IDLE
                continue

            if self._state is DecoderState.ESCAPE:
                if byte == ESC_END:
                    value = END
                elif byte == ESC_ESC:
                    value = ESC
                elif byte == END:
                    # The END closes the corrupted frame; nothing left to skip.
                    self._state = DecoderState.IDLE
                    self._frame_length = 0
                    raise InvalidEscapeSequence(byte, consumed=index + 1, written=written)
                else:
                    consumed = self._skip_frame(data, index + 1)
                    raise InvalidEscapeSequence(byte, consumed=consumed, written=written)
            elif byte == END:
                self._frame_length = 0
                return DecodeResult(DecodeStatus.FRAME_COMPLETE, index + 1, written)
            elif byte == ESC:
                self._state = DecoderState.ESCAPE
                continue
            else:
                value = byte

            if written == capacity:
                raise CapacityExceeded(capacity, consumed=index, written=written)
            view[written] = value
            written += 1
            self._frame_length += 1
            self._state = DecoderState.IDLE

        return DecodeResult(DecodeStatus.FRAME_INCOMPLETE, len(data), written)

    def _skip_frame(self, data: memoryview, start: int) -> int:
        """Skip past the next END at or after ``start``; return bytes consumed."""
        self._frame_length = 0
        for index in range(start, len(data)):
            if data[index] == END:
                self._state = DecoderState.IDLE
                return index + 1
        self._state = DecoderState.DISCARD
        return len(data)
