"""Exceptions raised by the SLIP codec."""

from __future__ import annotations


class SlipError(Exception):
    """Base class for all codec failures."""


class CapacityExceeded(SlipError):
    """The caller-supplied output buffer is too small.

    Attributes:
        required: Bytes the operation needed in total, or ``None`` when the
            decoder cannot know it ahead of time.
        available: Size of the output buffer that was supplied.
        consumed: Input bytes consumed before the failure. The decoder can be
            resumed from ``chunk[consumed:]``.
        written: Output bytes written before the failure.
    """

    def __init__(
        self,
        available: int,
        required: int | None = None,
        consumed: int = 0,
        written: int = 0,
    ) -> None:
        self.available = available
        self.required = required
        self.consumed = consumed
        self.written = written
        if required is not None:
            message = f"output buffer holds {available} bytes, {required} required"
        else:
            message = f"output buffer full after {written} of {available} bytes"
        super().__init__(message)


class InvalidEscapeSequence(SlipError, ValueError):
    """A byte following ESC was neither ESC_END nor ESC_ESC.

    Attributes:
        byte: The offending byte value.
        consumed: Input bytes consumed, including the skipped remainder of the
            corrupted frame.
        written: Output bytes written before the failure. They belong to the
            discarded frame.
    """

    def __init__(self, byte: int, consumed: int = 0, written: int = 0) -> None:
        self.byte = byte
        self.consumed = consumed
        self.written = written
        super().__init__(f"invalid byte 0x{byte:02X} after ESC")
