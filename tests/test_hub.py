"""
Tests for HubService: the ticker and callers share one serialized job queue.
"""
import asyncio

import pytest

from conftest import CountingSensor, FaultySensor, RecordingObserver
from iot_hub.domain.errors import CalibrationNotSupportedError, SensorNotFoundError
from iot_hub.domain.models import SensorCommand, Snapshot
from iot_hub.sensors.registry import SensorRegistry, build_default_registry
from iot_hub.services.hub import HubService


def _counting_hub(sample_seconds: float = 60.0) -> tuple[HubService, CountingSensor]:
    counter = CountingSensor("counter")
    registry = SensorRegistry()
    registry.register(counter)
    return HubService(registry=registry, sample_seconds=sample_seconds), counter


class TestHubLifecycle:

    @pytest.mark.asyncio
    async def test_ticks_append_in_order(self) -> None:
        hub, _ = _counting_hub(sample_seconds=0.02)
        await hub.start()
        await asyncio.sleep(0.3)
        await hub.stop()

        assert hub.ticks >= 3
        data = hub.history_for("counter")["data"]
        assert data == list(range(len(data)))
        timestamps = hub.history_for("counter")["timestamps"]
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_submit_when_stopped_raises(self) -> None:
        hub, _ = _counting_hub()
        with pytest.raises(RuntimeError):
            await hub.pull()

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_restartable(self) -> None:
        hub, _ = _counting_hub()
        await hub.start()
        await hub.start()
        assert hub.running
        await hub.stop()
        assert not hub.running
        await hub.start()
        assert (await hub.pull()).values == {"counter": 0}
        await hub.stop()

    @pytest.mark.asyncio
    async def test_ticks_publish_to_observers(self) -> None:
        hub, _ = _counting_hub(sample_seconds=0.02)
        obs = RecordingObserver("obs")
        await hub.start()
        await hub.connect(obs)
        await asyncio.sleep(0.2)
        await hub.stop()
        events = [m["event"] for m in obs.messages]
        assert len(events) >= 3
        assert set(events) == {"sensor_data"}

    @pytest.mark.asyncio
    async def test_failing_sensor_and_observer_do_not_stop_ticks(self) -> None:
        registry = build_default_registry()
        registry.register(FaultySensor())
        hub = HubService(registry=registry, sample_seconds=0.02)
        await hub.start()
        await hub.connect(RecordingObserver("broken", fail=True))
        await asyncio.sleep(0.2)
        await hub.stop()
        assert hub.ticks >= 3
        assert hub.observer_count == 0
        assert all(v is None for v in hub.history_for("faulty")["data"])
        assert all(v is not None for v in hub.history_for("humidity")["data"])


class TestHubCallers:

    @pytest.mark.asyncio
    async def test_pull_returns_computed_snapshot_and_extends_history(self) -> None:
        hub, _ = _counting_hub()
        await hub.start()
        try:
            snapshot = await hub.pull()
            assert isinstance(snapshot, Snapshot)
            assert snapshot.values == {"counter": 0}
            await hub.pull()
            assert hub.history_for("counter")["data"] == [0, 1]
        finally:
            await hub.stop()

    @pytest.mark.asyncio
    async def test_connect_sends_immediate_snapshot(self) -> None:
        hub, _ = _counting_hub()
        obs = RecordingObserver("obs")
        await hub.start()
        try:
            await hub.connect(obs)
            assert hub.observer_count == 1
            assert obs.messages[0]["event"] == "sensor_data"
            assert obs.messages[0]["data"]["counter"] == 0
            assert obs.messages[0]["data"]["counter_info"]["value"] == 0
            hub.disconnect(obs)
            assert hub.observer_count == 0
        finally:
            await hub.stop()

    @pytest.mark.asyncio
    async def test_pull_for_answers_only_that_observer(self) -> None:
        hub, _ = _counting_hub()
        a, b = RecordingObserver("a"), RecordingObserver("b")
        await hub.start()
        try:
            await hub.connect(a)
            await hub.connect(b)
            await hub.pull_for(a)
            assert len(a.messages) == 2
            assert len(b.messages) == 1
        finally:
            await hub.stop()

    @pytest.mark.asyncio
    async def test_command_is_applied_before_next_sample(self) -> None:
        hub = HubService(registry=build_default_registry(), sample_seconds=60.0)
        obs = RecordingObserver("obs")
        await hub.start()
        try:
            ack_task = asyncio.create_task(hub.command(obs, SensorCommand("temperature", "toggle")))
            pull_task = asyncio.create_task(hub.pull())
            ack, snapshot = await asyncio.gather(ack_task, pull_task)
            assert ack.status == "command_executed"
            assert snapshot.values["temperature"] is None
        finally:
            await hub.stop()

    @pytest.mark.asyncio
    async def test_toggle_and_calibrate_return_status(self) -> None:
        hub = HubService(registry=build_default_registry(), sample_seconds=60.0)
        await hub.start()
        try:
            status = await hub.toggle("sound")
            assert status["active"] is False
            status = await hub.calibrate("airquality")
            assert status["current_aqi"] == 25.0
        finally:
            await hub.stop()

    @pytest.mark.asyncio
    async def test_boundary_errors_propagate(self) -> None:
        registry = build_default_registry()
        registry.register(FaultySensor())
        hub = HubService(registry=registry, sample_seconds=60.0)
        await hub.start()
        try:
            with pytest.raises(SensorNotFoundError):
                await hub.toggle("radiation")
            with pytest.raises(CalibrationNotSupportedError):
                await hub.calibrate("faulty", 1.0)
            with pytest.raises(SensorNotFoundError):
                hub.history_for("radiation")
            with pytest.raises(SensorNotFoundError):
                hub.sensor_status("radiation")
            # The worker survives caller errors
            assert (await hub.pull()).values["temperature"] is not None
        finally:
            await hub.stop()

    @pytest.mark.asyncio
    async def test_sensor_registered_late_is_kept_in_history(self) -> None:
        hub, _ = _counting_hub()
        await hub.start()
        try:
            await hub.pull()
            hub.registry.register(CountingSensor("late"))
            assert hub.history_for("late")["data"] == [None]
            await hub.pull()
            assert hub.history_for("late")["data"] == [None, 0]
            assert hub.history_for("counter")["data"] == [0, 1]
        finally:
            await hub.stop()
