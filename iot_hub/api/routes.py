from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..domain.errors import CalibrationNotSupportedError, SensorNotFoundError
from ..services.hub import HubService
from .schemas import CalibrateRequest, HubStatus, SensorActionResponse, SensorHistory

logger = logging.getLogger(__name__)

router = APIRouter()


# Overridden in main via app.dependency_overrides
def get_hub() -> HubService:
    raise RuntimeError("Hub dependency not configured")


def _not_found(e: SensorNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Sensor type not found: {e.sensor_type}")


@router.get("/status", response_model=HubStatus)
async def hub_status(hub: HubService = Depends(get_hub)):
    return HubStatus(
        status="online" if hub.running else "stopped",
        message=f"{settings.app_name} is running" if hub.running else f"{settings.app_name} is stopped",
        connected_devices=hub.observer_count,
    )


@router.get("/sensors/current")
async def current_readings(hub: HubService = Depends(get_hub)):
    snapshot = await hub.pull()
    return snapshot.to_wire()


@router.get("/sensors/history")
async def full_history(hub: HubService = Depends(get_hub)):
    return hub.history_for()


@router.get("/sensors/{sensor_type}", response_model=SensorHistory)
async def sensor_history(sensor_type: str, hub: HubService = Depends(get_hub)):
    try:
        return hub.history_for(sensor_type)
    except SensorNotFoundError as e:
        raise _not_found(e)


@router.get("/sensors/{sensor_type}/status")
async def sensor_status(sensor_type: str, hub: HubService = Depends(get_hub)):
    try:
        return hub.sensor_status(sensor_type)
    except SensorNotFoundError as e:
        raise _not_found(e)


@router.post("/sensors/{sensor_type}/toggle", response_model=SensorActionResponse)
async def toggle_sensor(sensor_type: str, hub: HubService = Depends(get_hub)):
    try:
        status = await hub.toggle(sensor_type)
    except SensorNotFoundError as e:
        raise _not_found(e)
    return SensorActionResponse(message=f"{sensor_type} sensor toggled", status=status)


@router.post("/sensors/{sensor_type}/calibrate", response_model=SensorActionResponse)
async def calibrate_sensor(
    sensor_type: str,
    req: Optional[CalibrateRequest] = None,
    hub: HubService = Depends(get_hub),
):
    value = req.value if req is not None else None
    try:
        status = await hub.calibrate(sensor_type, value)
    except SensorNotFoundError as e:
        raise _not_found(e)
    except CalibrationNotSupportedError:
        raise HTTPException(status_code=400, detail="Sensor does not support calibration")
    return SensorActionResponse(message=f"{sensor_type} sensor calibrated", status=status)
