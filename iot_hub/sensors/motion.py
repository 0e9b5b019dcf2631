from __future__ import annotations
import logging
import random
import time
from typing import Callable, Optional

from ..core.timeutil import now_utc
from ..domain.models import SensorReading
from .common import inactive_reading, io_pause, is_number

logger = logging.getLogger(__name__)


class MotionSensor:
    sensor_type = "motion"
    name = "Motion Sensor"
    unit = "boolean"

    def __init__(
        self,
        sensitivity: float = 0.1,
        rng: Optional[random.Random] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sensitivity = float(sensitivity)
        self.last_motion = False
        self.motion_started: Optional[float] = None
        self.active = True
        self._rng = rng or random.Random()
        self._monotonic = monotonic

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        detected = self._rng.random() < self.sensitivity
        now = self._monotonic()
        if detected and not self.last_motion:
            self.motion_started = now
        self.last_motion = detected

        # Held across clear samples until the next rising edge
        duration = now - self.motion_started if self.motion_started is not None else 0.0

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=1 if detected else 0,
            status="detected" if detected else "clear",
            extras={"duration": round(duration, 3), "sensitivity": self.sensitivity},
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Motion sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        if not is_number(value) or not 0 < value <= 1:
            logger.debug("Motion calibration ignored: %r", value)
            return
        self.sensitivity = float(value)
        logger.info("Motion sensor sensitivity set to %s", value)

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "sensitivity": self.sensitivity,
            "last_motion": self.last_motion,
            "unit": self.unit,
        }
