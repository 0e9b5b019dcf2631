from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..core.config import settings
from ..core.timeutil import now_utc
from ..domain.interfaces import Observer
from ..domain.models import CommandAck, SensorCommand, Snapshot
from ..sensors.registry import SensorRegistry, build_default_registry
from ..storage.history import HistoryStore
from .aggregator import AggregationCycle
from .broadcaster import Broadcaster

logger = logging.getLogger(__name__)


@dataclass
class _Job:
    name: str
    run: Callable[[], Awaitable[Any]]
    future: Optional[asyncio.Future] = None


class HubService:
    """Owns the sensors, their history and the observers.

    Two sources feed one queue: the ticker (every ``sample_seconds``) and
    callers (pull, connect, commands). A single worker task runs the queued
    jobs one at a time, so no two jobs ever touch sensor state or history
    concurrently and ticks append in order.
    """

    def __init__(
        self,
        registry: Optional[SensorRegistry] = None,
        history: Optional[HistoryStore] = None,
        sample_seconds: Optional[float] = None,
        sample_timeout: Optional[float] = None,
        send_timeout: Optional[float] = None,
    ) -> None:
        self.registry = registry if registry is not None else build_default_registry()
        self.history = history if history is not None else HistoryStore(
            self.registry.types(), settings.history_capacity
        )
        self.aggregator = AggregationCycle(self.registry, self.history, sample_timeout)
        self.broadcaster = Broadcaster(self.registry, send_timeout)
        self._sample_seconds = sample_seconds if sample_seconds is not None else settings.sample_seconds

        self._queue: asyncio.Queue[Optional[_Job]] = asyncio.Queue()
        self._stop = asyncio.Event()
        self._ticker: Optional[asyncio.Task] = None
        self._worker: Optional[asyncio.Task] = None
        self._tick_pending = False

        self.ticks = 0
        self.started_at = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._queue = asyncio.Queue()
        self._tick_pending = False
        self.started_at = now_utc()
        self._worker = asyncio.create_task(self._work(), name="hub_worker")
        self._ticker = asyncio.create_task(self._tick_loop(), name="hub_ticker")

    async def stop(self) -> None:
        self._stop.set()
        if self._ticker:
            await self._ticker
            self._ticker = None
        if self._worker:
            await self._queue.put(None)
            await self._worker
            self._worker = None

        # Anything queued behind the sentinel never ran
        while not self._queue.empty():
            job = self._queue.get_nowait()
            if job and job.future and not job.future.done():
                job.future.set_exception(RuntimeError("Hub service stopped"))
        logger.info("Hub stopped after %d ticks", self.ticks)

    async def _tick_loop(self) -> None:
        logger.info(
            "Ticker started (sample_seconds=%s sensors=%d)", self._sample_seconds, len(self.registry)
        )
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._sample_seconds)
            except asyncio.TimeoutError:
                # A slow cycle must not pile up a backlog of ticks
                if not self._tick_pending:
                    self._tick_pending = True
                    self._queue.put_nowait(_Job("tick", self._tick))
        logger.info("Ticker stopped")

    async def _work(self) -> None:
        while True:
            job = await self._queue.get()
            if job is None:
                break
            try:
                result = await job.run()
            except Exception as e:
                if job.future is None:
                    logger.exception("Hub job %s failed: %s", job.name, e)
                elif not job.future.done():
                    job.future.set_exception(e)
            else:
                if job.future is not None and not job.future.done():
                    job.future.set_result(result)

    async def _submit(self, name: str, run: Callable[[], Awaitable[Any]]) -> Any:
        if not self.running:
            raise RuntimeError("Hub service not running")
        future = asyncio.get_running_loop().create_future()
        await self._queue.put(_Job(name, run, future))
        return await future

    async def _tick(self) -> None:
        self._tick_pending = False
        snapshot = await self.aggregator.sample()
        self.ticks += 1
        await self.broadcaster.publish(snapshot)

    # --- caller API ---

    async def pull(self) -> Snapshot:
        return await self._submit("pull", self.aggregator.sample)

    async def pull_for(self, observer: Observer) -> Snapshot:
        async def run() -> Snapshot:
            snapshot = await self.aggregator.sample()
            await self.broadcaster.send(observer, snapshot)
            return snapshot

        return await self._submit("pull_for", run)

    async def connect(self, observer: Observer) -> Snapshot:
        async def run() -> Snapshot:
            self.broadcaster.add(observer)
            snapshot = await self.aggregator.sample()
            await self.broadcaster.send(observer, snapshot)
            return snapshot

        return await self._submit("connect", run)

    def disconnect(self, observer: Observer) -> None:
        # Membership only; publish iterates a copy, so this is safe between jobs
        self.broadcaster.remove(observer)

    async def command(self, observer: Observer, command: SensorCommand) -> CommandAck:
        async def run() -> CommandAck:
            return await self.broadcaster.handle_command(observer, command)

        return await self._submit("command", run)

    async def toggle(self, sensor_type: str) -> dict:
        async def run() -> dict:
            return self.registry.toggle(sensor_type)

        return await self._submit("toggle", run)

    async def calibrate(self, sensor_type: str, value: Optional[float] = None) -> dict:
        async def run() -> dict:
            return self.registry.calibrate(sensor_type, value)

        return await self._submit("calibrate", run)

    def sensor_status(self, sensor_type: str) -> dict:
        return self.registry.status(sensor_type)

    def history_for(self, sensor_type: Optional[str] = None) -> dict:
        if sensor_type is None:
            return self.history.query_all()
        if sensor_type in self.registry:
            self.history.track(sensor_type)
        return self.history.query(sensor_type)

    @property
    def observer_count(self) -> int:
        return self.broadcaster.count
