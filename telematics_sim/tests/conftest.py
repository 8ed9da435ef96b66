"""Shared pytest fixtures for telematics simulator tests."""

from __future__ import annotations

import asyncio
from typing import Callable, Generator, List, Tuple

import pytest

from telematics_sim.protocol.frame import CRC_SIZE, HEADER_SIZE
from telematics_sim.protocol.framing import ESCAPE_BYTE, FRAME_DELIMITER
from telematics_sim.schemas import CellInfo, GPSFix, Mileage, OBDReadings, StatusFlags
from telematics_sim.sensors.base import SensorSource


class FixedSensorSource(SensorSource):
    """Returns the same readings every time; attributes may be swapped."""

    def __init__(self) -> None:
        self.gps = GPSFix(
            latitude=10.25,
            longitude=-33.5,
            speed=88,
            direction=270,
            hdop=7,
        )
        self.altitude = 512
        self.cell = CellInfo(mcc=605, mnc=2, lac=4321, cell_id=54321, signal_dbm=-77)
        self.obd = OBDReadings(
            rpm=2500, speed=88, coolant_temp=90, intake_temp=35, throttle_pos=42
        )
        self.status = StatusFlags(flags=(True, False, True, False))
        self.mileage = Mileage(meters=123_456_789)
        self.gps_reads: List[bool] = []

    def read_gps(self, three_d: bool) -> GPSFix:
        self.gps_reads.append(three_d)
        if three_d:
            return self.gps.model_copy(update={"altitude": self.altitude})
        return self.gps

    def read_cell(self) -> CellInfo:
        return self.cell

    def read_obd(self) -> OBDReadings:
        return self.obd

    def read_status(self) -> StatusFlags:
        return self.status

    def read_mileage(self) -> Mileage:
        return self.mileage


def _unstuff(wire: bytes) -> bytes:
    """Strip delimiters and undo escaping, asserting the framing rules."""
    assert wire[0] == FRAME_DELIMITER
    assert wire[-1] == FRAME_DELIMITER
    out = bytearray()
    body = iter(wire[1:-1])
    for byte in body:
        assert byte != FRAME_DELIMITER, "unescaped delimiter inside frame"
        if byte == ESCAPE_BYTE:
            second = next(body)
            original = second ^ ESCAPE_BYTE
            assert original in (ESCAPE_BYTE, FRAME_DELIMITER)
            out.append(original)
        else:
            out.append(byte)
    return bytes(out)


def _split_segments(inner: bytes) -> List[Tuple[int, bytes]]:
    """Return ``[(tag, payload), ...]`` between the header and the CRC."""
    segments: List[Tuple[int, bytes]] = []
    pos = HEADER_SIZE
    end = len(inner) - CRC_SIZE
    while pos < end:
        tag, length = inner[pos], inner[pos + 1]
        segments.append((tag, inner[pos + 2 : pos + 2 + length]))
        pos += 2 + length
    assert pos == end, "segment lengths do not add up to the frame size"
    return segments


@pytest.fixture(autouse=True)
def _reset_profile_cache() -> Generator[None, None, None]:
    """Clear the sensor profile cache between tests."""
    from telematics_sim.sensors import random_source

    random_source._profiles_cache = None
    yield
    random_source._profiles_cache = None


@pytest.fixture()
def fixed_source() -> FixedSensorSource:
    return FixedSensorSource()


@pytest.fixture()
def unstuff() -> Callable[[bytes], bytes]:
    return _unstuff


@pytest.fixture()
def split_segments() -> Callable[[bytes], List[Tuple[int, bytes]]]:
    return _split_segments



class TCPSink:
    """Loopback TCP server recording every byte it receives."""

    def __init__(self) -> None:
        self.received = bytearray()
        self.port = 0
        self._server: asyncio.AbstractServer | None = None
        self._writers: List[asyncio.StreamWriter] = []

    async def __aenter__(self) -> "TCPSink":
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(self, *exc_info) -> None:
        for writer in self._writers:
            writer.close()
        self._server.close()
        await self._server.wait_closed()

    async def wait_for_bytes(self, count: int, timeout: float = 5.0) -> bytes:
        async def _poll() -> None:
            while len(self.received) < count:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(_poll(), timeout=timeout)
        return bytes(self.received)

    def frames(self) -> List[bytes]:
        """Received wire frames, delimiters re-attached."""
        return [
            bytes((FRAME_DELIMITER,)) + body + bytes((FRAME_DELIMITER,))
            for body in bytes(self.received).split(bytes((FRAME_DELIMITER,)))
            if body
        ]

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self._writers.append(writer)
        while True:
            chunk = await reader.read(4096)
            if not chunk:
                break
            self.received += chunk
        writer.close()


@pytest.fixture()
def tcp_sink() -> TCPSink:
    return TCPSink()
