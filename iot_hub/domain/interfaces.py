from __future__ import annotations
from typing import Any, Optional, Protocol, runtime_checkable
from .models import SensorReading


@runtime_checkable
class SensorModel(Protocol):
    sensor_type: str
    name: str
    unit: str
    active: bool

    async def sample(self) -> SensorReading:
        ...

    def toggle(self) -> None:
        ...

    def calibrate(self, value: Optional[float] = None) -> None:
        ...

    def status(self) -> dict:
        ...


@runtime_checkable
class Observer(Protocol):
    observer_id: str

    async def send(self, message: dict[str, Any]) -> None:
        ...
