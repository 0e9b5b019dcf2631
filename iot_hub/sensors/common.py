from __future__ import annotations
import asyncio
import math
from datetime import datetime
from typing import Any

from ..core.timeutil import now_utc
from ..domain.models import SensorReading


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def is_number(value: Any) -> bool:
    # bool is an int subclass, but a switch state is not a calibration value
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def inactive_reading(sensor_type: str, unit: str, ts: datetime | None = None) -> SensorReading:
    return SensorReading(
        timestamp=ts or now_utc(),
        sensor_type=sensor_type,
        unit=unit,
        value=None,
        status="inactive",
    )


async def io_pause() -> None:
    """Yield once to the event loop, standing in for a bus transaction."""
    await asyncio.sleep(0)
