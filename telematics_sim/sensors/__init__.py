"""Sensor sources feeding the frame assembler.

Provides ``SensorSource`` ABC with one concrete implementation:

* ``RandomSensorSource`` -- uniform samples around a named profile.
"""

from telematics_sim.sensors.base import SensorSource

__all__ = ["SensorSource"]
