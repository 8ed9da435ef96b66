"""Emission driver: one wire frame per scheduler tick."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Tuple

import structlog

from telematics_sim.protocol.frame import BuiltFrame, build_frame, seconds_since_2000
from telematics_sim.protocol.framing import encapsulate
from telematics_sim.sensors.base import SensorSource
from telematics_sim.session import DeviceSession
from telematics_sim.transport import StreamTransport

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def make_clock(kind: str) -> Clock:
    """Return a clock for the ``timestamp_clock`` setting."""
    if kind == "local":
        return datetime.now
    if kind == "utc":
        return lambda: datetime.now(timezone.utc)
    raise ValueError(f"Unknown timestamp clock '{kind}'. Available: local, utc")


class FrameEmitter:
    """Owns the device session and turns sensor reads into wire bytes."""

    def __init__(
        self,
        session: DeviceSession,
        source: SensorSource,
        clock: Clock = datetime.now,
    ) -> None:
        self._session = session
        self._source = source
        self._clock = clock

    @property
    def session(self) -> DeviceSession:
        return self._session

    def next_frame(self) -> Tuple[BuiltFrame, bytes]:
        """Build the next inner frame and its stuffed, delimited wire form."""
        frame = build_frame(
            self._session,
            self._source,
            seconds_since_2000(self._clock()),
        )
        return frame, encapsulate(frame.data)

    async def emit(self, transport: StreamTransport) -> BuiltFrame:
        """Produce the next wire frame and hand it to *transport*.

        Transport errors propagate unchanged; the caller ends the run.
        """
        frame, wire = self.next_frame()
        await transport.send(wire, frame_number=frame.number)
        logger.info(
            "frame_sent",
            frame_number=frame.number,
            protocol=f"0.{frame.protocol_minor}",
            location=frame.location_mode.value,
            gps_dim=frame.gps_dim.value if frame.gps_dim else None,
            wire_bytes=len(wire),
        )
        logger.debug("frame_hex", frame_number=frame.number, hex=wire.hex(" ").upper())
        return frame
