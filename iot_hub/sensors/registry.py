from __future__ import annotations
import logging
from typing import Iterator, Optional

from ..domain.errors import CalibrationNotSupportedError, SensorNotFoundError
from ..domain.interfaces import SensorModel
from .air_quality import AirQualitySensor
from .humidity import HumiditySensor
from .light import LightSensor
from .motion import MotionSensor
from .pressure import PressureSensor
from .sound import SoundSensor
from .temperature import TemperatureSensor

logger = logging.getLogger(__name__)


class SensorRegistry:
    """Sensor type name -> model, in registration order."""

    def __init__(self) -> None:
        self._sensors: dict[str, SensorModel] = {}

    def register(self, sensor: SensorModel) -> None:
        if sensor.sensor_type in self._sensors:
            raise ValueError(f"Sensor type already registered: {sensor.sensor_type}")
        self._sensors[sensor.sensor_type] = sensor

    def get(self, sensor_type: str) -> SensorModel:
        try:
            return self._sensors[sensor_type]
        except KeyError:
            raise SensorNotFoundError(sensor_type) from None

    def __contains__(self, sensor_type: object) -> bool:
        return sensor_type in self._sensors

    def __iter__(self) -> Iterator[str]:
        return iter(self._sensors)

    def __len__(self) -> int:
        return len(self._sensors)

    def types(self) -> list[str]:
        return list(self._sensors)

    def items(self) -> list[tuple[str, SensorModel]]:
        return list(self._sensors.items())

    def supports_calibration(self, sensor_type: str) -> bool:
        return callable(getattr(self.get(sensor_type), "calibrate", None))

    def toggle(self, sensor_type: str) -> dict:
        sensor = self.get(sensor_type)
        sensor.toggle()
        return sensor.status()

    def calibrate(self, sensor_type: str, value: Optional[float] = None) -> dict:
        sensor = self.get(sensor_type)
        if not self.supports_calibration(sensor_type):
            raise CalibrationNotSupportedError(sensor_type)
        sensor.calibrate(value)
        return sensor.status()

    def status(self, sensor_type: str) -> dict:
        return self.get(sensor_type).status()


def build_default_registry() -> SensorRegistry:
    registry = SensorRegistry()
    for sensor in (
        TemperatureSensor(),
        HumiditySensor(),
        MotionSensor(),
        LightSensor(),
        PressureSensor(),
        AirQualitySensor(),
        SoundSensor(),
    ):
        registry.register(sensor)
    logger.info("Registered sensors: %s", ", ".join(registry.types()))
    return registry
