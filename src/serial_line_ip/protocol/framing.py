"""Byte-string helpers on top of the buffer-oriented codec.

``encode`` and ``Decoder`` never allocate; the helpers here do, trading that
for a simpler ``bytes in, bytes out`` interface::

    wire = build_frame(b"hello")
    reader = FrameReader()
    for payload in reader.feed(wire):
        ...
"""

from __future__ import annotations

import logging

from .buffers import byte_view
from .decoder import Decoder
from .encoder import encode, encoded_size
from .errors import CapacityExceeded, InvalidEscapeSequence
from .markers import END

logger = logging.getLogger(__name__)

DEFAULT_MAX_FRAME_SIZE = 4096  # decoded payload bytes


def build_frame(payload: bytes = b"", leading_end: bool = False) -> bytes:
    """Encode ``payload`` into a new ``bytes`` frame.

    Args:
        payload: Raw payload bytes.
        leading_end: Prepend an END so a receiver holding line noise flushes
            it as an (empty or malformed) frame before this one.
    """
    offset = 1 if leading_end else 0
    frame = bytearray(offset + encoded_size(payload))
    if leading_end:
        frame[0] = END
    encode(payload, memoryview(frame)[offset:])
    return bytes(frame)


class FrameReader:
    """Reassemble payloads from a stream of stuffed bytes.

    Decodes into one fixed buffer of ``max_frame_size`` bytes. Frames that
    overflow it, and frames carrying a bad escape, are logged and dropped;
    decoding resumes at the next END.
    """

    def __init__(
        self,
        max_frame_size: int = DEFAULT_MAX_FRAME_SIZE,
        skip_empty: bool = True,
    ) -> None:
        if max_frame_size < 0:
            raise ValueError(f"max_frame_size must be non-negative, got {max_frame_size}")
        self.max_frame_size = max_frame_size
        self.skip_empty = skip_empty
        self._decoder = Decoder()
        self._buffer = bytearray(max_frame_size)
        self._length = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        """Payload bytes held for the frame in progress."""
        return self._length

    def reset(self) -> None:
        """Discard any partial frame."""
        self._decoder.reset()
        self._length = 0

    def feed(self, data: bytes) -> list[bytes]:
        """Consume ``data`` and return every payload it completes, in order."""
        frames: list[bytes] = []
        view = byte_view(data)
        window = memoryview(self._buffer)

        while view:
            try:
                result = self._decoder.decode(view, window[self._length:])
            except InvalidEscapeSequence as e:
                logger.warning("Dropping malformed frame: %s", e)
                self.dropped += 1
                self._length = 0
                view = view[e.consumed:]
                continue
            except CapacityExceeded as e:
                logger.warning(
                    "Dropping frame larger than %d bytes", self.max_frame_size
                )
                self.dropped += 1
                self._length = 0
                self._decoder.resync()
                view = view[e.consumed:]
                continue

            self._length += result.written
            view = view[result.consumed:]
            if not result.complete:
                break

            frame = bytes(self._buffer[: self._length])
            self._length = 0
            if frame or not self.skip_empty:
                frames.append(frame)
            else:
                logger.debug("Skipping empty frame")

        return frames


def parse_frames(data: bytes, skip_empty: bool = True) -> list[bytes]:
    """Decode every complete frame in ``data``.

    A trailing frame without its END is ignored. Malformed frames are
    dropped, as with ``FrameReader``.
    """
    # A payload never decodes larger than its stuffed form.
    reader = FrameReader(max_frame_size=len(data), skip_empty=skip_empty)
    return reader.feed(data)
