"""Helpers for caller-owned byte buffers."""

from __future__ import annotations

WritableBuffer = bytearray | memoryview


def writable_view(buffer: WritableBuffer) -> memoryview:
    """Return a flat, writable, unsigned-byte view over ``buffer``.

    Accepts anything exposing the buffer protocol (``bytearray``,
    ``memoryview``, ``array.array``...).

    Raises:
        TypeError: If ``buffer`` is read-only or not a buffer at all.
    """
    view = memoryview(buffer)
    if view.readonly:
        raise TypeError(
            f"output buffer must be writable, got read-only {type(buffer).__name__}"
        )
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def byte_view(data) -> memoryview:
    """Return a flat unsigned-byte view over any bytes-like input."""
    view = memoryview(data)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view
