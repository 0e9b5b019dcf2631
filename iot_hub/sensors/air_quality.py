from __future__ import annotations
import logging
import random
from typing import Optional

from ..core.timeutil import now_utc
from ..domain.models import Classification, SensorReading
from .common import clamp, inactive_reading, io_pause

logger = logging.getLogger(__name__)

DEFAULT_AQI = 25.0
DEFAULT_CO2 = 400.0  # ppm
DEFAULT_VOC = 0.1    # ppm

# (upper bound inclusive, label, color); anything above the last bound is Hazardous
AQI_TIERS = (
    (50, "Good", "#00E400"),
    (100, "Moderate", "#FFFF00"),
    (150, "Unhealthy for Sensitive", "#FF7E00"),
    (200, "Unhealthy", "#FF0000"),
    (300, "Very Unhealthy", "#8F3F97"),
)
HAZARDOUS = Classification("Hazardous", "#7E0023")


def classify_aqi(aqi: float) -> Classification:
    for bound, label, color in AQI_TIERS:
        if aqi <= bound:
            return Classification(label, color)
    return HAZARDOUS


class AirQualitySensor:
    sensor_type = "airquality"
    name = "Air Quality Sensor"
    unit = "AQI"

    aqi_range = (0.0, 300.0)
    co2_range = (350.0, 2000.0)
    voc_range = (0.0, 5.0)

    # SGP30 over I2C, MQ-135 on an analog pin as fallback
    i2c_address = 0x58
    analog_pin = "A0"
    model = "SGP30"

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.aqi = DEFAULT_AQI
        self.co2 = DEFAULT_CO2
        self.voc = DEFAULT_VOC
        self.active = True
        self._rng = rng or random.Random()

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        self.aqi = clamp(self.aqi + self._rng.uniform(-5.0, 5.0), *self.aqi_range)
        self.co2 = clamp(self.co2 + self._rng.uniform(-10.0, 10.0), *self.co2_range)
        self.voc = clamp(self.voc + self._rng.uniform(-0.05, 0.05), *self.voc_range)

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=round(self.aqi),
            extras={
                "level": classify_aqi(self.aqi),
                "co2": round(self.co2),
                "voc": round(self.voc, 3),
            },
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Air quality sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        # Reference value is meaningless here; calibration restores clean-air baseline
        self.aqi = DEFAULT_AQI
        self.co2 = DEFAULT_CO2
        self.voc = DEFAULT_VOC
        logger.info("Air quality sensor calibrated to baseline values")

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "current_aqi": self.aqi,
            "co2_level": self.co2,
            "voc_level": self.voc,
            "unit": self.unit,
            "hardware": {
                "model": self.model,
                "address": hex(self.i2c_address),
                "interface": "I2C",
                "alternative_pin": self.analog_pin,
            },
        }
