from __future__ import annotations
import logging
import random
from typing import Optional

from ..core.timeutil import now_utc
from ..domain.models import SensorReading
from .common import clamp, inactive_reading, io_pause, is_number

logger = logging.getLogger(__name__)

STANDARD_PRESSURE = 1013.25


class PressureSensor:
    sensor_type = "pressure"
    name = "Pressure Sensor"
    unit = "hPa"

    min_value = 980.0
    max_value = 1050.0

    # BMP280 on the I2C bus
    i2c_address = 0x76
    model = "BMP280"

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.current = STANDARD_PRESSURE
        self.active = True
        self._rng = rng or random.Random()

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        self.current = clamp(
            self.current + self._rng.uniform(-1.0, 1.0), self.min_value, self.max_value
        )

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=round(self.current, 2),
            extras={"accuracy": "±0.1 hPa"},
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Pressure sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        if not is_number(value):
            logger.debug("Pressure calibration ignored: %r", value)
            return
        self.current = clamp(float(value), self.min_value, self.max_value)
        logger.info("Pressure sensor calibrated to %s %s", self.current, self.unit)

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "current_value": self.current,
            "unit": self.unit,
            "range": f"{self.min_value:g}-{self.max_value:g} {self.unit}",
            "hardware": {
                "model": self.model,
                "address": hex(self.i2c_address),
                "interface": "I2C",
            },
        }
