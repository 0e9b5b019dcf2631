from __future__ import annotations
from collections import deque
from datetime import datetime
from typing import Iterable, Optional

from ..core.timeutil import isoformat
from ..domain.errors import SensorNotFoundError
from ..domain.models import Snapshot

HISTORY_CAPACITY = 100


class HistoryStore:
    """Last ``capacity`` aggregated values per sensor type.

    All buffers advance together: every append pushes one entry onto each
    type's buffer (``None`` when the snapshot has no value for it) and one
    onto the shared timestamp buffer, so index ``i`` lines up across them.
    """

    def __init__(self, sensor_types: Iterable[str], capacity: int = HISTORY_CAPACITY) -> None:
        self.capacity = capacity
        self._buffers: dict[str, deque[Optional[float]]] = {
            t: deque(maxlen=capacity) for t in sensor_types
        }
        self._timestamps: deque[datetime] = deque(maxlen=capacity)

    def track(self, sensor_type: str) -> None:
        """Start a buffer for a type first seen after construction.

        Earlier slots are padded with ``None`` so indexes still line up with
        the shared timestamps.
        """
        if sensor_type not in self._buffers:
            self._buffers[sensor_type] = deque(
                [None] * len(self._timestamps), maxlen=self.capacity
            )

    def append(self, snapshot: Snapshot) -> None:
        for sensor_type in snapshot.values:
            self.track(sensor_type)
        for sensor_type, buf in self._buffers.items():
            buf.append(snapshot.values.get(sensor_type))
        self._timestamps.append(snapshot.timestamp)

    def __len__(self) -> int:
        return len(self._timestamps)

    def timestamps(self) -> list[str]:
        return [isoformat(ts) for ts in self._timestamps]

    def query(self, sensor_type: str) -> dict:
        if sensor_type not in self._buffers:
            raise SensorNotFoundError(sensor_type)
        return {
            "type": sensor_type,
            "data": list(self._buffers[sensor_type]),
            "timestamps": self.timestamps(),
        }

    def query_all(self) -> dict:
        out: dict[str, list] = {t: list(buf) for t, buf in self._buffers.items()}
        out["timestamp"] = self.timestamps()
        return out
