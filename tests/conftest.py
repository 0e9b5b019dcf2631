"""Pytest configuration and fixtures for test suite."""

import os

# Must be set before iot_hub.core.config is imported
os.environ.setdefault("HUB_LOG_FILE", "")
os.environ.setdefault("HUB_SAMPLE_SECONDS", "0.2")

import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from iot_hub.core.timeutil import now_utc
from iot_hub.domain.models import SensorReading


class FixedClock:
    """Local-time source pinned to a given hour."""

    def __init__(self, hour: int) -> None:
        self.hour = hour

    def __call__(self) -> datetime:
        return datetime(2024, 6, 1, self.hour, 30, tzinfo=timezone.utc)


class CountingSensor:
    """Deterministic sensor reporting 0, 1, 2, ... on successive samples."""

    name = "Counting Sensor"
    unit = "count"

    def __init__(self, sensor_type: str = "counter") -> None:
        self.sensor_type = sensor_type
        self.active = True
        self.count = 0

    async def sample(self) -> SensorReading:
        value = self.count
        self.count += 1
        return SensorReading(timestamp=now_utc(), sensor_type=self.sensor_type, unit=self.unit, value=value)

    def toggle(self) -> None:
        self.active = not self.active

    def calibrate(self, value=None) -> None:
        self.count = 0

    def status(self) -> dict:
        return {"type": self.sensor_type, "active": self.active, "count": self.count}


class FaultySensor:
    """Raises on every sample; has no calibration support."""

    name = "Faulty Sensor"
    unit = "?"

    def __init__(self, sensor_type: str = "faulty") -> None:
        self.sensor_type = sensor_type
        self.active = True

    async def sample(self) -> SensorReading:
        raise RuntimeError("bus error")

    def toggle(self) -> None:
        self.active = not self.active

    def status(self) -> dict:
        return {"type": self.sensor_type, "active": self.active}


class RecordingObserver:
    def __init__(self, observer_id: str, fail: bool = False) -> None:
        self.observer_id = observer_id
        self.fail = fail
        self.messages: list[dict] = []

    async def send(self, message: dict) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.messages.append(message)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def client():
    """TestClient with the lifespan running, so the hub is started."""
    from iot_hub.main import app

    with TestClient(app) as c:
        yield c
