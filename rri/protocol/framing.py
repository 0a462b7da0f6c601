from __future__ import annotations

import asyncio

from .constants import ENCODING, LENGTH_PREFIX_SIZE, MAX_FRAME_SIZE
from .errors import FramingError


def encode_frame(payload: str) -> bytes:
    """Encode text payload into a frame (4 bytes big-endian length + UTF-8 text)."""
    data = payload.encode(ENCODING)
    try:
        length = len(data).to_bytes(LENGTH_PREFIX_SIZE, "big")
    except OverflowError as exc:
        raise FramingError(f"Payload of {len(data)} bytes does not fit the length prefix") from exc
    return length + data


async def read_exact(reader: asyncio.StreamReader, n: int) -> bytes:
    """
    Read exactly ``n`` bytes, accumulating as many partial reads as the stream needs.
    Raises asyncio.IncompleteReadError when the stream ends first.
    """
    buf = bytearray()
    while len(buf) < n:
        chunk = await reader.read(n - len(buf))
        if not chunk:
            raise asyncio.IncompleteReadError(bytes(buf), n)
        buf.extend(chunk)
    return bytes(buf)


async def read_frame(reader: asyncio.StreamReader) -> str:
    """Read a single frame from the stream and decode its payload."""
    try:
        header = await read_exact(reader, LENGTH_PREFIX_SIZE)
    except asyncio.IncompleteReadError as exc:
        raise FramingError(f"Stream closed after {len(exc.partial)} of {LENGTH_PREFIX_SIZE} header bytes") from exc

    length = int.from_bytes(header, "big")
    if length == 0:
        raise FramingError("Empty frame")
    if length > MAX_FRAME_SIZE:
        raise FramingError(f"Frame of {length} bytes exceeds maximum of {MAX_FRAME_SIZE}")

    try:
        data = await read_exact(reader, length)
    except asyncio.IncompleteReadError as exc:
        raise FramingError(f"Stream closed after {len(exc.partial)} of {length} payload bytes") from exc

    try:
        return data.decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise FramingError(f"Decode failed: {exc}") from exc


__all__ = ["encode_frame", "read_exact", "read_frame"]
