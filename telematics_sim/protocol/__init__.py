"""Binary frame construction and transport encoding.

* ``encoder``  -- big-endian primitive writer (``FrameBuffer``).
* ``segments`` -- tagged, length-prefixed payload segments.
* ``frame``    -- header + segments + CRC assembly.
* ``crc``      -- CRC-16/CCITT-FALSE.
* ``framing``  -- byte stuffing and 0xF8 delimiters.
"""

from telematics_sim.protocol.crc import crc16_ccitt_false
from telematics_sim.protocol.encoder import FrameBuffer
from telematics_sim.protocol.frame import build_frame
from telematics_sim.protocol.framing import encapsulate, escape_bytes

__all__ = [
    "FrameBuffer",
    "build_frame",
    "crc16_ccitt_false",
    "encapsulate",
    "escape_bytes",
]
