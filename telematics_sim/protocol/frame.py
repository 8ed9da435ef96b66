"""Frame assembler.

Inner frame layout (before stuffing)::

    minor(1) type(1) device_id(15) timestamp(4)
    <GPS or LBS segment> <OBD> <STATUS> <MILEAGE> crc16(2)

The timestamp counts seconds since 2000-01-01 00:00:00 on the device
clock.  Bit 31 doubles as the "this frame carries GPS" flag, so only
31 bits are left for time (good until 2068).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import structlog

from telematics_sim.exceptions import EncodeFailure
from telematics_sim.protocol import segments
from telematics_sim.protocol.crc import crc16_ccitt_false
from telematics_sim.protocol.encoder import FrameBuffer
from telematics_sim.sensors.base import SensorSource
from telematics_sim.session import DEVICE_ID_WIDTH, DeviceSession, GPSDimension, LocationMode

logger = structlog.get_logger(__name__)

FRAME_TYPE = 0x01
PROTOCOL_MINOR = 0x01
PROTOCOL_MINOR_BUMPED = 0x02
# Every Nth frame (1-indexed) advertises the bumped minor version.
MINOR_BUMP_PERIOD = 6

HEADER_SIZE = 2 + DEVICE_ID_WIDTH + 4
CRC_SIZE = 2

GPS_TIMESTAMP_FLAG = 0x80000000
PROTOCOL_EPOCH = datetime(2000, 1, 1)


@dataclass(frozen=True)
class BuiltFrame:
    """An inner frame (CRC appended, not yet stuffed) plus what went into it."""

    data: bytes
    number: int
    protocol_minor: int
    location_mode: LocationMode
    gps_dim: Optional[GPSDimension]
    timestamp: int


def seconds_since_2000(now: datetime) -> int:
    """Whole seconds between the protocol epoch and *now*.

    Uses the wall-clock fields of *now* as-is: a naive local time gives
    local seconds, a UTC-aware time gives UTC seconds.
    """
    delta = now.replace(tzinfo=None) - PROTOCOL_EPOCH
    return delta // timedelta(seconds=1)


def protocol_minor_for(frame_number: int) -> int:
    if frame_number % MINOR_BUMP_PERIOD == 0:
        return PROTOCOL_MINOR_BUMPED
    return PROTOCOL_MINOR


def build_frame(
    session: DeviceSession,
    source: SensorSource,
    timestamp: int,
) -> BuiltFrame:
    """Build the next inner frame for *session*, advancing its state.

    *timestamp* is :func:`seconds_since_2000` of the current time; the
    GPS flag is added here.
    """
    if not 0 <= timestamp < GPS_TIMESTAMP_FLAG:
        raise EncodeFailure(
            f"timestamp {timestamp} does not fit in 31 bits", field="timestamp"
        )

    session.frame_counter += 1
    number = session.frame_counter
    minor = protocol_minor_for(number)
    location = session.location_mode

    wire_timestamp = timestamp
    if location is LocationMode.GPS:
        wire_timestamp |= GPS_TIMESTAMP_FLAG

    buf = FrameBuffer()
    buf.put_u8(minor, field="protocol_minor")
    buf.put_u8(FRAME_TYPE, field="frame_type")
    buf.put_fixed(session.device_id_bytes, DEVICE_ID_WIDTH)
    buf.put_u32(wire_timestamp, field="timestamp")

    gps_dim: Optional[GPSDimension] = None
    if location is LocationMode.GPS:
        gps_dim = session.gps_dim
        three_d = gps_dim is GPSDimension.D3
        segments.write_gps(buf, source.read_gps(three_d=three_d), three_d=three_d)
        session.gps_dim = gps_dim.toggled()
    else:
        segments.write_lbs(buf, source.read_cell())
    session.location_mode = location.toggled()

    segments.write_obd(buf, source.read_obd())
    segments.write_status(buf, source.read_status())
    segments.write_mileage(buf, source.read_mileage())

    buf.put_u16(crc16_ccitt_false(buf.getvalue()), field="crc")

    frame = BuiltFrame(
        data=buf.getvalue(),
        number=number,
        protocol_minor=minor,
        location_mode=location,
        gps_dim=gps_dim,
        timestamp=wire_timestamp,
    )
    logger.debug(
        "frame_built",
        frame_number=number,
        protocol=f"0.{minor}",
        location=location.value,
        gps_dim=gps_dim.value if gps_dim else None,
        inner_bytes=len(frame.data),
    )
    return frame
