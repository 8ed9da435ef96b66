"""Abstract base class for sensor sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from telematics_sim.schemas import CellInfo, GPSFix, Mileage, OBDReadings, StatusFlags


class SensorSource(ABC):
    """One read per segment; called synchronously while a frame is built."""

    @abstractmethod
    def read_gps(self, three_d: bool) -> GPSFix:
        """Return a position fix, with altitude when *three_d* is set."""

    @abstractmethod
    def read_cell(self) -> CellInfo:
        """Return the serving cell used for LBS positioning."""

    @abstractmethod
    def read_obd(self) -> OBDReadings:
        ...

    @abstractmethod
    def read_status(self) -> StatusFlags:
        ...

    @abstractmethod
    def read_mileage(self) -> Mileage:
        ...
