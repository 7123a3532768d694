"""SLIP encoder: byte-stuff a payload into a caller-owned buffer.

Wire layout of one frame::

    [END]  stuffed payload  END
    ^ optional flush byte

Inside the stuffed payload ``0xC0`` becomes ``0xDB 0xDC`` and ``0xDB``
becomes ``0xDB 0xDD``. All other bytes pass through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

from .buffers import WritableBuffer, byte_view, writable_view
from .errors import CapacityExceeded
from .markers import END, ESC, ESC_END, ESC_ESC


def encoded_size(payload: bytes) -> int:
    """Number of bytes ``encode`` writes for ``payload``, terminating END included."""
    data = byte_view(payload)
    return len(data) + sum(1 for byte in data if byte == END or byte == ESC) + 1


def max_encoded_size(length: int) -> int:
    """Worst-case frame size for a payload of ``length`` bytes."""
    if length < 0:
        raise ValueError(f"Payload length must be non-negative, got {length}")
    return 2 * length + 1


def encode(payload: bytes, out: WritableBuffer) -> int:
    """Encode ``payload`` as one SLIP frame into ``out``.

    Args:
        payload: Raw payload bytes.
        out: Writable buffer receiving the frame, starting at offset 0.

    Returns:
        Number of bytes written.

    Raises:
        CapacityExceeded: If ``out`` cannot hold the whole frame. Nothing is
            written in that case.
    """
    view = writable_view(out)
    data = byte_view(payload)
    required = encoded_size(data)
    if required > len(view):
        raise CapacityExceeded(len(view), required=required)

    pos = 0
    for byte in data:
        if byte == END:
            view[pos] = ESC
            view[pos + 1] = ESC_END
            pos += 2
        elif byte == ESC:
            view[pos] = ESC
            view[pos + 1] = ESC_ESC
            pos += 2
        else:
            view[pos] = byte
            pos += 1
    view[pos] = END
    return pos + 1


@dataclass
class EncodeTotals:
    """Input bytes read and output bytes written by an ``Encoder`` call."""

    read: int = 0
    written: int = 0

    def __add__(self, other: EncodeTotals) -> EncodeTotals:
        return EncodeTotals(self.read + other.read, self.written + other.written)


class Encoder:
    """Incremental SLIP encoder for payloads that arrive in pieces.

    Usage::

        enc = Encoder()
        totals = enc.encode(part1, out)
        totals += enc.encode(part2, memoryview(out)[totals.written:])
        totals += enc.finish(memoryview(out)[totals.written:])

    ``encode`` reports partial progress instead of failing when ``out`` fills
    up; the caller continues with ``chunk[totals.read:]``. An escape pair is
    never split across calls.
    """

    def __init__(self, leading_end: bool = False) -> None:
        self._leading_end = leading_end
        self._started = False

    @property
    def leading_end(self) -> bool:
        return self._leading_end

    @property
    def started(self) -> bool:
        """True once any byte of the current packet has been written."""
        return self._started

    def _write_header(self, view: memoryview) -> int:
        if self._started:
            return 0
        if not self._leading_end:
            self._started = True
            return 0
        if len(view) < 1:
            raise CapacityExceeded(0, required=1)
        view[0] = END
        self._started = True
        return 1

    def encode(self, chunk: bytes, out: WritableBuffer) -> EncodeTotals:
        """Stuff as much of ``chunk`` as fits into ``out``.

        Raises:
            CapacityExceeded: If the leading END is still pending and ``out``
                is empty.
        """
        view = writable_view(out)
        data = byte_view(chunk)
        pos = self._write_header(view)
        capacity = len(view)

        read = 0
        for byte in data:
            if byte == END or byte == ESC:
                if capacity - pos < 2:
                    break
                view[pos] = ESC
                view[pos + 1] = ESC_END if byte == END else ESC_ESC
                pos += 2
            else:
                if capacity - pos < 1:
                    break
                view[pos] = byte
                pos += 1
            read += 1

        return EncodeTotals(read=read, written=pos)

    def finish(self, out: WritableBuffer) -> EncodeTotals:
        """Terminate the current packet and get ready for the next one.

        Raises:
            CapacityExceeded: If ``out`` has no room for the closing byte(s).
                The encoder state is left untouched.
        """
        view = writable_view(out)
        required = 1 if self._started or not self._leading_end else 2
        if len(view) < required:
            raise CapacityExceeded(len(view), required=required)

        pos = self._write_header(view)
        view[pos] = END
        self._started = False
        return EncodeTotals(read=0, written=pos + 1)

    def reset(self) -> None:
        """Abandon the current packet without writing anything."""
        self._started = False
