"""Byte stuffing and delimiter wrapping for the stream transport.

On the wire every frame is ``F8 <stuffed bytes> F8``.  Inside the
stuffed region 0xF8 never appears and 0xF7 only ever starts a two-byte
escape pair ``F7 (b ^ F7)``.  The receiver undoes this by replacing each
``F7 x`` with ``x ^ F7``.
"""

from __future__ import annotations

FRAME_DELIMITER = 0xF8
ESCAPE_BYTE = 0xF7

_RESERVED = frozenset((FRAME_DELIMITER, ESCAPE_BYTE))


def escape_bytes(data: bytes) -> bytes:
    """Escape every delimiter and escape byte in *data*."""
    escaped = bytearray()
    for byte in data:
        if byte in _RESERVED:
            escaped.append(ESCAPE_BYTE)
            escaped.append(byte ^ ESCAPE_BYTE)
        else:
            escaped.append(byte)
    return bytes(escaped)


def encapsulate(frame: bytes) -> bytes:
    """Stuff *frame* and surround it with delimiters."""
    return bytes((FRAME_DELIMITER,)) + escape_bytes(frame) + bytes((FRAME_DELIMITER,))
