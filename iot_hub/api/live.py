from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..services.hub import HubService
from .routes import get_hub
from .schemas import ControlCommandIn

logger = logging.getLogger(__name__)

router = APIRouter()


class WebSocketObserver:
    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket
        self.observer_id = uuid.uuid4().hex[:12]

    async def send(self, message: dict[str, Any]) -> None:
        await self._ws.send_json(message)


async def _send_error(websocket: WebSocket, detail: Any) -> None:
    await websocket.send_json({"event": "error", "data": {"detail": detail}})


@router.websocket("/ws")
async def live_channel(websocket: WebSocket, hub: HubService = Depends(get_hub)):
    await websocket.accept()
    observer = WebSocketObserver(websocket)
    await hub.connect(observer)

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except (KeyError, ValueError):
                # KeyError: binary frame carries no text payload
                await _send_error(websocket, "Invalid JSON")
                continue

            event = message.get("event") if isinstance(message, dict) else None
            if event == "get_sensor_data":
                await hub.pull_for(observer)
            elif event == "control_device":
                try:
                    cmd = ControlCommandIn.model_validate(message.get("data") or {})
                except ValidationError as e:
                    await _send_error(websocket, e.errors(include_url=False, include_context=False))
                    continue
                await hub.command(observer, cmd.to_command())
            else:
                await _send_error(websocket, f"Unknown event: {event}")
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(observer)
