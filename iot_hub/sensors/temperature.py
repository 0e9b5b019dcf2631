from __future__ import annotations
import logging
import random
from typing import Optional

from ..core.timeutil import now_utc
from ..domain.models import SensorReading
from .common import clamp, inactive_reading, io_pause, is_number

logger = logging.getLogger(__name__)


class TemperatureSensor:
    sensor_type = "temperature"
    name = "Temperature Sensor"
    unit = "°C"

    def __init__(
        self,
        baseline: float = 25.0,
        variance: float = 5.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.baseline = float(baseline)
        self.variance = float(variance)
        self.current = float(baseline)
        self.active = True
        self._rng = rng or random.Random()

    @property
    def min_value(self) -> float:
        return self.baseline - self.variance

    @property
    def max_value(self) -> float:
        return self.baseline + self.variance

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        step = self._rng.uniform(-1.0, 1.0) * 0.5
        self.current = clamp(self.current + step, self.min_value, self.max_value)

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=round(self.current, 1),
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Temperature sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        if not is_number(value):
            logger.debug("Temperature calibration ignored: %r", value)
            return
        self.baseline = float(value)
        self.current = float(value)
        logger.info("Temperature sensor calibrated to %s%s", value, self.unit)

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "current_value": self.current,
            "unit": self.unit,
            "range": f"{self.min_value}-{self.max_value} {self.unit}",
        }
