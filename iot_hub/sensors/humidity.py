from __future__ import annotations
import logging
import random
from typing import Optional

from ..core.timeutil import now_utc
from ..domain.models import SensorReading
from .common import clamp, inactive_reading, io_pause, is_number

logger = logging.getLogger(__name__)

MIN_HUMIDITY = 0.0
MAX_HUMIDITY = 100.0


class HumiditySensor:
    sensor_type = "humidity"
    name = "Humidity Sensor"
    unit = "%"

    def __init__(
        self,
        baseline: float = 60.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.current = clamp(float(baseline), MIN_HUMIDITY, MAX_HUMIDITY)
        self.active = True
        self._rng = rng or random.Random()

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        step = self._rng.uniform(-1.5, 1.5) * 0.3
        self.current = clamp(self.current + step, MIN_HUMIDITY, MAX_HUMIDITY)

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=round(self.current, 1),
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Humidity sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        if not is_number(value):
            logger.debug("Humidity calibration ignored: %r", value)
            return
        self.current = clamp(float(value), MIN_HUMIDITY, MAX_HUMIDITY)
        logger.info("Humidity sensor calibrated to %s%s", self.current, self.unit)

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "current_value": self.current,
            "unit": self.unit,
            "range": f"0-100 {self.unit}",
        }
