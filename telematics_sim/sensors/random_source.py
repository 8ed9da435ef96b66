"""Random sensor source (no vehicle required).

Loads value ranges from ``fixtures/sensor_profiles.json`` and draws
independent uniform samples for every read.  Integer ranges in the
profile are inclusive ``[low, high]`` pairs.
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

from telematics_sim.schemas import CellInfo, GPSFix, Mileage, OBDReadings, StatusFlags
from telematics_sim.sensors.base import SensorSource

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


class RandomSensorSource(SensorSource):
    """Simulated readings around the position and ranges of a profile."""

    def __init__(
        self,
        profile: str = "tunis",
        rng: Optional[random.Random] = None,
    ) -> None:
        profiles = _load_profiles()
        if profile not in profiles:
            available = ", ".join(sorted(profiles))
            raise ValueError(
                f"Unknown sensor profile '{profile}'. Available: {available}"
            )
        self._profile_name = profile
        self._profile: Dict[str, Any] = profiles[profile]
        self._rng = rng if rng is not None else random.Random()

    @property
    def profile_name(self) -> str:
        return self._profile_name

    # -- location -----------------------------------------------------------

    def read_gps(self, three_d: bool) -> GPSFix:
        gps = self._profile["gps"]
        jitter = gps["jitter_deg"]
        return GPSFix(
            latitude=gps["latitude"] + self._rng.uniform(-jitter, jitter),
            longitude=gps["longitude"] + self._rng.uniform(-jitter, jitter),
            speed=self._int(gps["speed"]),
            direction=self._int(gps["direction"]),
            hdop=self._int(gps["hdop"]),
            altitude=self._int(gps["altitude"]) if three_d else None,
        )

    def read_cell(self) -> CellInfo:
        lbs = self._profile["lbs"]
        return CellInfo(
            mcc=lbs["mcc"],
            mnc=self._int(lbs["mnc"]),
            lac=self._int(lbs["lac"]),
            cell_id=self._int(lbs["cell_id"]),
            signal_dbm=self._int(lbs["signal_dbm"]),
        )

    # -- vehicle ------------------------------------------------------------

    def read_obd(self) -> OBDReadings:
        obd = self._profile["obd"]
        return OBDReadings(
            rpm=self._int(obd["rpm"]),
            speed=self._int(obd["speed"]),
            coolant_temp=self._int(obd["coolant_temp"]),
            intake_temp=self._int(obd["intake_temp"]),
            throttle_pos=self._int(obd["throttle_pos"]),
        )

    def read_status(self) -> StatusFlags:
        return StatusFlags(
            flags=tuple(self._rng.random() < 0.5 for _ in range(4))
        )

    def read_mileage(self) -> Mileage:
        return Mileage(meters=self._int(self._profile["mileage_m"]))

    # -- internal -----------------------------------------------------------

    def _int(self, bounds: List[int]) -> int:
        low, high = bounds
        return self._rng.randint(low, high)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_profiles_cache: Optional[Dict[str, Any]] = None


def _load_profiles() -> Dict[str, Any]:
    global _profiles_cache
    if _profiles_cache is None:
        path = _FIXTURES_DIR / "sensor_profiles.json"
        with open(path, encoding="utf-8") as fh:
            _profiles_cache = json.load(fh)
    return _profiles_cache


def available_profiles() -> List[str]:
    return sorted(_load_profiles())
