from __future__ import annotations
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from ..domain.models import SensorCommand


class AppHealthOK(BaseModel):
    status: str
    app: str


class HubStatus(BaseModel):
    status: Literal["online", "stopped"]
    message: str
    connected_devices: int


class CalibrateRequest(BaseModel):
    value: Optional[float] = None


class SensorActionResponse(BaseModel):
    message: str
    status: dict[str, Any]


class SensorHistory(BaseModel):
    type: str
    data: list[Optional[float]]
    timestamps: list[str]


class ControlCommandIn(BaseModel):
    # "device" is what the browser dashboard sends
    target_type: str = Field(validation_alias=AliasChoices("target_type", "device"))
    action: str
    # Left untyped: a malformed calibration value is ignored by the sensor, not rejected here
    value: Any = None

    def to_command(self) -> SensorCommand:
        return SensorCommand(target_type=self.target_type, action=self.action, value=self.value)
