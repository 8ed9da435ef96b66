"""Per-connection device state carried from one frame to the next."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEVICE_ID_WIDTH = 15


class LocationMode(str, Enum):
    GPS = "gps"
    LBS = "lbs"

    def toggled(self) -> "LocationMode":
        return LocationMode.LBS if self is LocationMode.GPS else LocationMode.GPS


class GPSDimension(str, Enum):
    D2 = "2d"
    D3 = "3d"

    def toggled(self) -> "GPSDimension":
        return GPSDimension.D3 if self is GPSDimension.D2 else GPSDimension.D2


def encode_device_id(device_id: str) -> bytes:
    """Return the ASCII bytes of *device_id*, rejecting anything too long."""
    try:
        raw = device_id.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError(f"device_id must be ASCII, got {device_id!r}") from exc
    if len(raw) > DEVICE_ID_WIDTH:
        raise ValueError(
            f"device_id must be at most {DEVICE_ID_WIDTH} bytes, got {len(raw)}"
        )
    return raw


@dataclass
class DeviceSession:
    """State owned by the emission driver.

    ``location_mode`` and ``gps_dim`` together walk the cycle
    (GPS, 2D) -> LBS -> (GPS, 3D) -> LBS -> ...  A new session (e.g.
    after a reconnect) always starts from the top with counter 0.
    """

    device_id: str
    frame_counter: int = 0
    location_mode: LocationMode = LocationMode.GPS
    gps_dim: GPSDimension = GPSDimension.D2

    def __post_init__(self) -> None:
        self._device_id_bytes = encode_device_id(self.device_id)

    @property
    def device_id_bytes(self) -> bytes:
        return self._device_id_bytes
