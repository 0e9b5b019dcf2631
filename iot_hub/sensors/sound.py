from __future__ import annotations
import logging
import random
from datetime import datetime
from typing import Callable, Optional

from ..core.timeutil import now_local, now_utc
from ..domain.models import Classification, SensorReading
from .common import clamp, inactive_reading, io_pause, is_number

logger = logging.getLogger(__name__)

QUIET_ROOM_DB = 35.0
SMOOTHING = 0.3
SPIKE_PROBABILITY = 0.1

# (exclusive upper bound, label, color)
NOISE_TIERS = (
    (30, "Very Quiet", "#4CAF50"),
    (40, "Quiet", "#8BC34A"),
    (55, "Moderate", "#FFEB3B"),
    (70, "Loud", "#FF9800"),
    (85, "Very Loud", "#FF5722"),
)
HARMFUL = Classification("Harmful", "#F44336")


def classify_noise(db: float) -> Classification:
    for bound, label, color in NOISE_TIERS:
        if db < bound:
            return Classification(label, color)
    return HARMFUL


class SoundSensor:
    """Sound pressure level in dB with peak-hold and running average.

    ``calibration_offset`` is kept for the microphone path (MAX4466 behind an
    ADC); the simulated level is reported uncorrected.
    """

    sensor_type = "sound"
    name = "Sound Level Sensor"
    unit = "dB"

    min_level = 20.0
    max_level = 120.0

    analog_pin = "A1"
    microphone_type = "Electret"
    model = "MAX4466"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self.current = QUIET_ROOM_DB
        self.peak = QUIET_ROOM_DB
        self.average = QUIET_ROOM_DB
        self.calibration_offset = 0.0
        self.sensitivity = 1.0
        self.active = True
        self._rng = rng or random.Random()
        self._clock = clock

    def _target_level(self) -> float:
        hour = self._clock().hour
        target = QUIET_ROOM_DB
        if 6 <= hour <= 22:
            target += self._rng.uniform(0.0, 20.0)
        else:
            target += self._rng.uniform(0.0, 5.0)
        if self._rng.random() < SPIKE_PROBABILITY:
            target += self._rng.uniform(0.0, 30.0)
        return target

    async def sample(self) -> SensorReading:
        await io_pause()
        if not self.active:
            return inactive_reading(self.sensor_type, self.unit)

        target = self._target_level()
        self.current = clamp(
            self.current + (target - self.current) * SMOOTHING, self.min_level, self.max_level
        )
        self.peak = max(self.peak * 0.99, self.current)
        self.average = self.average * 0.9 + self.current * 0.1

        return SensorReading(
            timestamp=now_utc(),
            sensor_type=self.sensor_type,
            unit=self.unit,
            value=round(self.current, 1),
            extras={
                "level": classify_noise(self.current),
                "peak": round(self.peak, 1),
                "average": round(self.average, 1),
            },
        )

    def toggle(self) -> None:
        self.active = not self.active
        logger.info("Sound sensor %s", "activated" if self.active else "deactivated")

    def calibrate(self, value: Optional[float] = None) -> None:
        if value is None:
            self.peak = self.current
            self.average = self.current
            logger.info("Sound sensor peak values reset")
            return
        if not is_number(value):
            logger.debug("Sound calibration ignored: %r", value)
            return
        self.calibration_offset = float(value) - self.current
        logger.info("Sound sensor calibrated with offset: %s dB", self.calibration_offset)

    def set_sensitivity(self, sensitivity: float) -> None:
        if is_number(sensitivity) and 0 < sensitivity <= 2:
            self.sensitivity = float(sensitivity)
            logger.info("Sound sensor sensitivity set to %s", sensitivity)

    def status(self) -> dict:
        return {
            "name": self.name,
            "type": self.sensor_type,
            "active": self.active,
            "current_level": self.current,
            "peak_level": self.peak,
            "average_level": self.average,
            "unit": self.unit,
            "range": f"{self.min_level:g}-{self.max_level:g} {self.unit}",
            "calibration": {
                "offset": self.calibration_offset,
                "sensitivity": self.sensitivity,
            },
            "hardware": {
                "model": self.model,
                "type": self.microphone_type,
                "pin": self.analog_pin,
                "interface": "Analog",
            },
        }
