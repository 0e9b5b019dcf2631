from __future__ import annotations
import asyncio
import logging
from typing import Optional

from ..core.config import settings
from ..core.timeutil import now_utc
from ..domain.errors import HubError, UnknownActionError
from ..domain.interfaces import Observer
from ..domain.models import CommandAck, SensorCommand, Snapshot
from ..sensors.registry import SensorRegistry

logger = logging.getLogger(__name__)

SENSOR_DATA_EVENT = "sensor_data"
DEVICE_RESPONSE_EVENT = "device_response"


class Broadcaster:
    def __init__(self, registry: SensorRegistry, send_timeout: Optional[float] = None) -> None:
        self._registry = registry
        self._observers: dict[str, Observer] = {}
        self._timeout = send_timeout if send_timeout is not None else settings.send_timeout_seconds

    @property
    def count(self) -> int:
        return len(self._observers)

    def add(self, observer: Observer) -> None:
        self._observers[observer.observer_id] = observer
        logger.info("Observer connected: %s (total=%d)", observer.observer_id, self.count)

    def remove(self, observer: Observer) -> None:
        if self._observers.pop(observer.observer_id, None) is not None:
            logger.info("Observer disconnected: %s (total=%d)", observer.observer_id, self.count)

    async def _deliver(self, observer: Observer, message: dict) -> bool:
        try:
            await asyncio.wait_for(observer.send(message), timeout=self._timeout)
            return True
        except Exception as e:
            logger.warning("Delivery to %s failed, dropping observer: %r", observer.observer_id, e)
            self.remove(observer)
            return False

    async def send(self, observer: Observer, snapshot: Snapshot) -> bool:
        return await self._deliver(observer, {"event": SENSOR_DATA_EVENT, "data": snapshot.to_wire()})

    async def publish(self, snapshot: Snapshot) -> int:
        """Best-effort fan-out to the observers connected right now.

        Returns the number of successful deliveries.
        """
        message = {"event": SENSOR_DATA_EVENT, "data": snapshot.to_wire()}
        delivered = 0
        for observer in list(self._observers.values()):
            if await self._deliver(observer, message):
                delivered += 1
        return delivered

    def apply(self, command: SensorCommand) -> CommandAck:
        try:
            if command.action == "toggle":
                self._registry.toggle(command.target_type)
            elif command.action == "calibrate":
                self._registry.calibrate(command.target_type, command.value)
            else:
                raise UnknownActionError(command.action)
        except HubError as e:
            logger.warning("Command rejected %s/%s: %s", command.target_type, command.action, e)
            return CommandAck(command.target_type, "error", now_utc(), error=str(e))

        logger.info("Command executed: %s %s", command.action, command.target_type)
        return CommandAck(command.target_type, "command_executed", now_utc())

    async def handle_command(self, observer: Observer, command: SensorCommand) -> CommandAck:
        ack = self.apply(command)
        await self._deliver(observer, {"event": DEVICE_RESPONSE_EVENT, "data": ack.to_dict()})
        return ack
