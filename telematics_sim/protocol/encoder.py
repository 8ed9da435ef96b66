"""Fixed-width big-endian writer backed by a growable ``bytearray``."""

from __future__ import annotations

import struct

from telematics_sim.exceptions import EncodeFailure

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")


class FrameBuffer:
    """Append-only byte buffer with typed big-endian writers.

    Every ``put_*`` method returns ``self`` so short sequences can be
    chained.  A value that does not fit the declared width raises
    :class:`EncodeFailure` instead of being silently truncated.
    """

    def __init__(self) -> None:
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def getvalue(self) -> bytes:
        """Return an immutable copy of everything written so far."""
        return bytes(self._data)

    # -- integers -----------------------------------------------------------

    def put_u8(self, value: int, *, field: str = "u8") -> "FrameBuffer":
        return self._pack(_U8, value, field)

    def put_u16(self, value: int, *, field: str = "u16") -> "FrameBuffer":
        return self._pack(_U16, value, field)

    def put_u32(self, value: int, *, field: str = "u32") -> "FrameBuffer":
        return self._pack(_U32, value, field)

    def put_i32(self, value: int, *, field: str = "i32") -> "FrameBuffer":
        """Two's-complement signed 32-bit."""
        return self._pack(_I32, value, field)

    # -- byte strings -------------------------------------------------------

    def put_fixed(self, data: bytes, width: int) -> "FrameBuffer":
        """Write *data* truncated or right-padded with 0x00 to *width* bytes."""
        chunk = bytes(data[:width])
        self._data += chunk.ljust(width, b"\x00")
        return self

    def put_bytes(self, data: bytes) -> "FrameBuffer":
        self._data += data
        return self

    # -- internal -----------------------------------------------------------

    def _pack(self, fmt: struct.Struct, value: int, field: str) -> "FrameBuffer":
        try:
            self._data += fmt.pack(value)
        except struct.error as exc:
            raise EncodeFailure(
                f"{field}={value!r} does not fit {fmt.size * 8}-bit field",
                field=field,
            ) from exc
        return self
