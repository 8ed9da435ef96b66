"""Sensor reading models (Pydantic v2).

Each model feeds exactly one segment builder.  Field bounds mirror the
wire widths so out-of-range values fail here, at construction, rather
than deep inside the encoder.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

class GPSFix(BaseModel):
    """Satellite position fix.  ``altitude`` is set only for 3D fixes."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Degrees")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Degrees")
    speed: int = Field(..., ge=0, le=_U16_MAX, description="km/h")
    direction: int = Field(..., ge=0, le=359, description="Heading, degrees")
    hdop: int = Field(..., ge=0, le=0xFF)
    altitude: Optional[int] = Field(default=None, ge=0, le=_U16_MAX, description="m")

    @property
    def is_3d(self) -> bool:
        return self.altitude is not None


class CellInfo(BaseModel):
    """Serving cell identity used for LBS positioning."""

    model_config = ConfigDict(frozen=True)

    mcc: int = Field(..., ge=0, le=_U16_MAX, description="Mobile country code")
    mnc: int = Field(..., ge=0, le=_U16_MAX, description="Mobile network code")
    lac: int = Field(..., ge=0, le=_U16_MAX, description="Location area code")
    cell_id: int = Field(..., ge=0, le=_U32_MAX)
    signal_dbm: int = Field(..., ge=-0xFF, le=0, description="Received power, dBm")


# ---------------------------------------------------------------------------
# Vehicle
# ---------------------------------------------------------------------------

class OBDReadings(BaseModel):
    """Mode 01 PID values carried in the OBD segment."""

    model_config = ConfigDict(frozen=True)

    rpm: int = Field(..., ge=0, le=_U16_MAX)
    speed: int = Field(..., ge=0, le=0xFF, description="km/h")
    coolant_temp: int = Field(..., ge=0, le=0xFF)
    intake_temp: int = Field(..., ge=0, le=0xFF)
    throttle_pos: int = Field(..., ge=0, le=100, description="percent")


class StatusFlags(BaseModel):
    """Four independent device status bits (bit 0 first)."""

    model_config = ConfigDict(frozen=True)

    flags: Tuple[bool, bool, bool, bool] = (False, False, False, False)

    @property
    def bitfield(self) -> int:
        value = 0
        for bit, flag in enumerate(self.flags):
            if flag:
                value |= 1 << bit
        return value


class Mileage(BaseModel):
    """Odometer reading."""

    model_config = ConfigDict(frozen=True)

    meters: int = Field(..., ge=0, le=_U32_MAX)
