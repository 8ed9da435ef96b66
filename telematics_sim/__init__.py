"""Telematics simulator -- emulated OBD-II tracker over TCP.

Builds composite status frames (location, OBD PIDs, status bits,
mileage), protects them with CRC-16/CCITT-FALSE, byte-stuffs them
between 0xF8 delimiters and streams one frame per tick to a collection
server.
"""

__version__ = "0.1.0"
