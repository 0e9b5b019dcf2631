from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.timeutil import isoformat


@dataclass(frozen=True)
class Classification:
    label: str
    color: str

    def to_dict(self) -> dict:
        return {"level": self.label, "color": self.color}


@dataclass(frozen=True)
class SensorReading:
    timestamp: datetime
    sensor_type: str
    unit: str
    value: Optional[float] = None
    status: str = "active"
    location: str = "Indoor"
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "value": self.value,
            "unit": self.unit,
            "timestamp": isoformat(self.timestamp),
            "sensor_type": self.sensor_type,
            "status": self.status,
        }
        if self.status != "inactive":
            out["location"] = self.location
        for key, val in self.extras.items():
            out[key] = val.to_dict() if isinstance(val, Classification) else val
        return out


@dataclass(frozen=True)
class Snapshot:
    timestamp: datetime
    values: dict[str, Optional[float]]
    info: dict[str, SensorReading] = field(default_factory=dict)

    def to_wire(self) -> dict:
        out: dict[str, Any] = {"timestamp": isoformat(self.timestamp)}
        out.update(self.values)
        for sensor_type, reading in self.info.items():
            out[f"{sensor_type}_info"] = reading.to_dict()
        return out


@dataclass(frozen=True)
class CommandAck:
    target_type: str
    status: str  # "command_executed" | "error"
    timestamp: datetime
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "target_type": self.target_type,
            "status": self.status,
            "timestamp": isoformat(self.timestamp),
        }
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class SensorCommand:
    target_type: str
    action: str  # "toggle" | "calibrate"
    value: Any = None
