"""CRC-16/CCITT-FALSE as expected by the collection server.

Polynomial 0x1021, MSB-first, no reflection, no final XOR.  The server
seeds the register with 0x0000 (the catalogue XMODEM init); pass
``crc=0xFFFF`` to get the catalogue CCITT-FALSE value.
"""

from __future__ import annotations

POLYNOMIAL = 0x1021
INITIAL_VALUE = 0x0000


def crc16_ccitt_false(data: bytes, crc: int = INITIAL_VALUE) -> int:
    """Return the 16-bit CRC of *data*.

    *crc* may carry a running value to checksum a message in pieces.
    """
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ POLYNOMIAL
            else:
                crc <<= 1
            crc &= 0xFFFF
    return crc
