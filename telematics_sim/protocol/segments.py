"""Segment builders.

A segment is ``tag (1) | length (1) | payload``; the length byte counts
payload bytes only.  Builders render the payload into a scratch
``FrameBuffer`` first so the length always matches what was written.
"""

from __future__ import annotations

import math
from enum import IntEnum

from telematics_sim.exceptions import EncodeFailure
from telematics_sim.protocol.encoder import FrameBuffer
from telematics_sim.schemas import CellInfo, GPSFix, Mileage, OBDReadings, StatusFlags

MAX_SEGMENT_PAYLOAD = 0xFF

# Coordinates travel as integer micro-degrees.
COORDINATE_SCALE = 1_000_000


class SegmentTag(IntEnum):
    GPS = 0x01
    LBS = 0x02
    STATUS = 0x03
    MILEAGE = 0x04
    OBD = 0x07


class PID(IntEnum):
    """OBD-II mode 01 PIDs, in the order they appear in the OBD segment."""

    RPM = 0x0C
    SPEED = 0x0D
    COOLANT_TEMP = 0x05
    INTAKE_TEMP = 0x0F
    THROTTLE_POS = 0x11


# Fixed payload widths, used by the tests and by receivers.
GPS_PAYLOAD_2D = 13
GPS_PAYLOAD_3D = 15
LBS_PAYLOAD = 11
OBD_PAYLOAD = 10
STATUS_PAYLOAD = 2
MILEAGE_PAYLOAD = 4


def write_segment(buf: FrameBuffer, tag: SegmentTag, payload: bytes) -> None:
    """Append ``tag | len(payload) | payload`` to *buf*."""
    if len(payload) > MAX_SEGMENT_PAYLOAD:
        raise EncodeFailure(
            f"segment 0x{tag:02X} payload is {len(payload)} bytes "
            f"(max {MAX_SEGMENT_PAYLOAD})",
            field=SegmentTag(tag).name,
        )
    buf.put_u8(tag, field="tag").put_u8(len(payload), field="length")
    buf.put_bytes(payload)


def scale_coordinate(degrees: float) -> int:
    """Degrees -> floor(micro-degrees), kept signed."""
    return math.floor(degrees * COORDINATE_SCALE)


def write_gps(buf: FrameBuffer, fix: GPSFix, *, three_d: bool) -> None:
    if three_d and not fix.is_3d:
        raise EncodeFailure("3D GPS segment requires an altitude", field="altitude")

    payload = FrameBuffer()
    payload.put_i32(scale_coordinate(fix.latitude), field="latitude")
    payload.put_i32(scale_coordinate(fix.longitude), field="longitude")
    payload.put_u16(fix.speed, field="speed")
    payload.put_u16(fix.direction, field="direction")
    payload.put_u8(fix.hdop, field="hdop")
    if three_d:
        payload.put_u16(fix.altitude, field="altitude")
    write_segment(buf, SegmentTag.GPS, payload.getvalue())


def write_lbs(buf: FrameBuffer, cell: CellInfo) -> None:
    payload = FrameBuffer()
    payload.put_u16(cell.mcc, field="mcc")
    payload.put_u16(cell.mnc, field="mnc")
    payload.put_u16(cell.lac, field="lac")
    payload.put_u32(cell.cell_id, field="cell_id")
    payload.put_u8(abs(cell.signal_dbm), field="signal")
    write_segment(buf, SegmentTag.LBS, payload.getvalue())


def write_obd(buf: FrameBuffer, obd: OBDReadings) -> None:
    payload = FrameBuffer()
    payload.put_u8(PID.RPM).put_u16(obd.rpm, field="rpm")
    payload.put_u8(PID.SPEED).put_u8(obd.speed, field="speed")
    payload.put_u8(PID.COOLANT_TEMP).put_u8(obd.coolant_temp, field="coolant_temp")
    payload.put_u8(PID.INTAKE_TEMP).put_u8(obd.intake_temp, field="intake_temp")
    payload.put_u8(PID.THROTTLE_POS).put_u8(obd.throttle_pos, field="throttle_pos")
    write_segment(buf, SegmentTag.OBD, payload.getvalue())


def write_status(buf: FrameBuffer, status: StatusFlags) -> None:
    # Only the low nibble is defined; the rest stays zero.
    payload = FrameBuffer().put_u16(status.bitfield & 0x000F, field="status")
    write_segment(buf, SegmentTag.STATUS, payload.getvalue())


def write_mileage(buf: FrameBuffer, mileage: Mileage) -> None:
    payload = FrameBuffer().put_u32(mileage.meters, field="mileage")
    write_segment(buf, SegmentTag.MILEAGE, payload.getvalue())
