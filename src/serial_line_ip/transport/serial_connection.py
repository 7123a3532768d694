"""SLIP over a serial port.

Thin collaborator around pyserial: frames go out through ``build_frame`` and
incoming bytes are reassembled with a ``FrameReader``. The port is opened with
``serial.serial_for_url``, so besides device paths any pyserial URL works
(``loop://`` is handy for testing, ``socket://host:port`` for TCP bridges).
"""

from __future__ import annotations

import logging
import time
from collections import deque

import serial

from ..protocol.framing import DEFAULT_MAX_FRAME_SIZE, FrameReader, build_frame

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200
READ_TIMEOUT_S = 1.0
READ_CHUNK_SIZE = 256


class SerialConnection:
    """Send and receive SLIP frames on a serial port.

    Usage::

        with SerialConnection("/dev/ttyUSB0") as conn:
            conn.write_frame(b"ping")
            reply = conn.read_frame()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT_S,
        max_frame_size: int = DEFAULT_MAX_FRAME_SIZE,
        leading_end: bool = True,
    ) -> None:
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._leading_end = leading_end
        self._serial: serial.SerialBase | None = None
        self._reader = FrameReader(max_frame_size=max_frame_size)
        self._frames: deque[bytes] = deque()

    @property
    def port(self) -> str:
        return self._port

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        """Open the port.

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        if self.connected:
            return
        try:
            self._serial = serial.serial_for_url(
                self._port,
                baudrate=self._baudrate,
                timeout=min(self._timeout, 0.05),
            )
        except (serial.SerialException, ValueError) as e:
            raise ConnectionError(
                f"Could not open serial port {self._port!r}: {e}"
            ) from e

        self._reader.reset()
        self._frames.clear()
        logger.info("Connected to %s at %d baud", self._port, self._baudrate)

    def close(self) -> None:
        """Close the port. Frames not yet read are discarded."""
        if self._serial is None:
            return
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as e:
            logger.warning("Error closing %s: %s", self._port, e)
        finally:
            self._serial = None
            self._frames.clear()
            self._reader.reset()
            logger.info("Disconnected from %s", self._port)

    def __enter__(self) -> SerialConnection:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_port(self) -> serial.SerialBase:
        if not self.connected:
            raise ConnectionError(f"Serial port {self._port!r} is not open")
        return self._serial

    def write_frame(self, payload: bytes) -> int:
        """Encode ``payload`` and write it to the port.

        Returns:
            Number of bytes put on the wire.

        Raises:
            ConnectionError: If the port is closed or the write fails.
        """
        port = self._require_port()
        frame = build_frame(payload, leading_end=self._leading_end)
        try:
            written = port.write(frame)
            port.flush()
        except serial.SerialException as e:
            raise ConnectionError(f"Write to {self._port!r} failed: {e}") from e
        logger.debug("Sent %d-byte frame (%d payload bytes)", len(frame), len(payload))
        return written if written is not None else len(frame)

    def read_frame(self, timeout: float | None = None) -> bytes | None:
        """Return the next complete payload from the port.

        Args:
            timeout: Seconds to wait; defaults to the connection timeout.

        Returns:
            The decoded payload, or ``None`` if no frame completed in time.

        Raises:
            ConnectionError: If the port is closed or the read fails.
        """
        port = self._require_port()
        if timeout is None:
            timeout = self._timeout
        deadline = time.monotonic() + timeout

        while not self._frames:
            try:
                data = port.read(port.in_waiting or 1)
            except serial.SerialException as e:
                raise ConnectionError(f"Read from {self._port!r} failed: {e}") from e
            if data:
                self._frames.extend(self._reader.feed(data))
            if not self._frames and time.monotonic() >= deadline:
                logger.debug("No frame from %s within %.3fs", self._port, timeout)
                return None

        return self._frames.popleft()

    def transact(self, payload: bytes, timeout: float | None = None) -> bytes | None:
        """Send ``payload`` and wait for the next frame in reply."""
        self.write_frame(payload)
        return self.read_frame(timeout)
