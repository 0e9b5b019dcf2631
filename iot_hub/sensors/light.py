from __future__ import annotations
import logging
import random
from datetime import datetime
from typing import Callable, Optional

from ..core.timeutil import now_local, now_utc
from ..domain.models import SensorReading
from .common import clamp, inactive_reading, io_pause, is_number

logger = logging.getLogger(__name__)

MIN_LUX = 0.0
MAX_LUX = 1000.0


def time_of_day(hour: int) -> str:
    if hour < 6 or hour > 20:
        return "night"
    if hour < 8 or hour > 18:
        return "twilight"
    return "day"


_DAYLIGHT_FACTOR = {"night": 0.1, "twilight": 0.5, "day": 1.0}


class LightSensor:
    """Ambient light in lux, dimmed by the local time of day.

    The daylight factor is applied to the stored value, not just the reported
    one, so at night the level decays towards zero tick after tick and only
    climbs back through the random walk once the factor returns to 1.0.
    """

    sensor_type = "light"
    name = "Light Sensor"
    unit = "lux"

    def __init__(
        self,
        baseline: float = 500.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self.current = clamp(float(baseline), MIN_LUX, MAX_LUX)
        self.active = True
        self._rng = rng or random.Random()
        self._clock = clock

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        period = time_of_day(self._clock().hour)
        walked = self.current + self._rng.uniform(-50.0, 50.0) * 0.2
        self.current = clamp(walked * _DAYLIGHT_FACTOR[period], MIN_LUX, MAX_LUX)

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=round(self.current),
            extras={"time_of_day": period},
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Light sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        if not is_number(value) or value < 0:
            logger.debug("Light calibration ignored: %r", value)
            return
        self.current = clamp(float(value), MIN_LUX, MAX_LUX)
        logger.info("Light sensor calibrated to %s %s", self.current, self.unit)

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "current_value": self.current,
            "unit": self.unit,
            "range": f"0-1000 {self.unit}",
        }
