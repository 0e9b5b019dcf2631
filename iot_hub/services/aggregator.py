from __future__ import annotations
import asyncio
import logging
from typing import Optional

from ..core.config import settings
from ..core.timeutil import now_utc
from ..domain.models import SensorReading, Snapshot
from ..sensors.registry import SensorRegistry
from ..storage.history import HistoryStore

logger = logging.getLogger(__name__)


class AggregationCycle:
    def __init__(
        self,
        registry: SensorRegistry,
        history: HistoryStore,
        sample_timeout: Optional[float] = None,
    ) -> None:
        self._registry = registry
        self._history = history
        self._timeout = sample_timeout if sample_timeout is not None else settings.sample_timeout_seconds
        self._described: set[str] = set()

    async def _read(self, sensor_type: str) -> Optional[SensorReading]:
        sensor = self._registry.get(sensor_type)
        try:
            return await asyncio.wait_for(sensor.sample(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Sensor read TIMEOUT: %s (>%.2fs)", sensor_type, self._timeout)
        except Exception as e:
            logger.exception("Sensor read FAILED: %s: %s", sensor_type, e)
        return None

    async def sample(self) -> Snapshot:
        """Read every registered sensor once and record the result.

        A sensor that raises or exceeds the timeout contributes ``None``; the
        rest of the snapshot is unaffected. Full reading detail is attached
        only for each type's first successful read since startup.
        """
        ts = now_utc()
        values: dict[str, Optional[float]] = {}
        info: dict[str, SensorReading] = {}

        for sensor_type in self._registry.types():
            reading = await self._read(sensor_type)
            if reading is None:
                values[sensor_type] = None
                continue

            values[sensor_type] = reading.value
            if sensor_type not in self._described:
                info[sensor_type] = reading
                self._described.add(sensor_type)

        snapshot = Snapshot(timestamp=ts, values=values, info=info)
        self._history.append(snapshot)
        logger.debug("Snapshot recorded (%d types, history=%d)", len(values), len(self._history))
        return snapshot
