"""
Tests for AggregationCycle: one snapshot per call, fault isolation, first-reading detail.
"""
import asyncio

import pytest

from conftest import CountingSensor, FaultySensor
from iot_hub.domain.models import SensorReading
from iot_hub.core.timeutil import now_utc
from iot_hub.sensors.registry import SensorRegistry, build_default_registry
from iot_hub.services.aggregator import AggregationCycle
from iot_hub.storage.history import HistoryStore


class SlowSensor(CountingSensor):
    async def sample(self) -> SensorReading:
        await asyncio.sleep(5)
        return SensorReading(timestamp=now_utc(), sensor_type=self.sensor_type, unit=self.unit, value=1)


def _cycle(registry: SensorRegistry, timeout: float = 1.0) -> tuple[AggregationCycle, HistoryStore]:
    history = HistoryStore(registry.types())
    return AggregationCycle(registry, history, sample_timeout=timeout), history


class TestAggregationCycle:

    @pytest.mark.asyncio
    async def test_snapshot_covers_every_sensor(self) -> None:
        registry = build_default_registry()
        cycle, history = _cycle(registry)
        snapshot = await cycle.sample()
        assert set(snapshot.values) == set(registry.types())
        assert all(v is not None for v in snapshot.values.values())
        assert len(history) == 1

    @pytest.mark.asyncio
    async def test_failing_sensor_is_isolated(self) -> None:
        registry = build_default_registry()
        registry.register(FaultySensor())
        cycle, history = _cycle(registry)

        snapshot = await cycle.sample()

        assert snapshot.values["faulty"] is None
        for sensor_type in build_default_registry().types():
            assert snapshot.values[sensor_type] is not None
        assert history.query("faulty")["data"] == [None]

    @pytest.mark.asyncio
    async def test_failure_in_the_middle_does_not_stop_later_sensors(self) -> None:
        registry = SensorRegistry()
        registry.register(CountingSensor("first"))
        registry.register(FaultySensor())
        registry.register(CountingSensor("last"))
        cycle, _ = _cycle(registry)
        snapshot = await cycle.sample()
        assert snapshot.values == {"first": 0, "faulty": None, "last": 0}

    @pytest.mark.asyncio
    async def test_slow_sensor_times_out(self) -> None:
        registry = SensorRegistry()
        registry.register(SlowSensor("slow"))
        registry.register(CountingSensor("fast"))
        cycle, _ = _cycle(registry, timeout=0.05)
        snapshot = await asyncio.wait_for(cycle.sample(), timeout=2)
        assert snapshot.values == {"slow": None, "fast": 0}

    @pytest.mark.asyncio
    async def test_info_only_on_first_successful_reading(self) -> None:
        registry = SensorRegistry()
        registry.register(CountingSensor("counter"))
        registry.register(FaultySensor())
        cycle, _ = _cycle(registry)

        first = await cycle.sample()
        second = await cycle.sample()

        assert set(first.info) == {"counter"}
        assert first.info["counter"].value == 0
        assert second.info == {}
        wire = first.to_wire()
        assert wire["counter_info"]["value"] == 0
        assert "faulty_info" not in wire

    @pytest.mark.asyncio
    async def test_info_deferred_until_sensor_recovers(self) -> None:
        flaky = FaultySensor("flaky")
        registry = SensorRegistry()
        registry.register(flaky)
        cycle, _ = _cycle(registry)

        assert (await cycle.sample()).info == {}
        flaky.sample = CountingSensor("flaky").sample
        assert set((await cycle.sample()).info) == {"flaky"}

    @pytest.mark.asyncio
    async def test_inactive_sensor_recorded_as_none(self) -> None:
        registry = build_default_registry()
        registry.toggle("pressure")
        cycle, history = _cycle(registry)
        snapshot = await cycle.sample()
        assert snapshot.values["pressure"] is None
        assert snapshot.info["pressure"].status == "inactive"
        assert history.query("pressure")["data"] == [None]

    @pytest.mark.asyncio
    async def test_hundred_fifty_cycles_keep_last_hundred(self) -> None:
        registry = SensorRegistry()
        registry.register(CountingSensor("counter"))
        cycle, history = _cycle(registry)
        for _ in range(150):
            await cycle.sample()
        assert history.query("counter")["data"] == list(range(50, 150))

    @pytest.mark.asyncio
    async def test_wire_shape(self) -> None:
        registry = build_default_registry()
        cycle, _ = _cycle(registry)
        wire = (await cycle.sample()).to_wire()
        assert wire["timestamp"].endswith("Z")
        for sensor_type in registry.types():
            assert sensor_type in wire
            assert wire[f"{sensor_type}_info"]["sensor_type"] == sensor_type
