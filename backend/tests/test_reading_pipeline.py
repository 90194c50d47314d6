import logging
import random

import pytest

from fuel_telemetry.exceptions import NotFoundError, PersistenceError
from fuel_telemetry.models import FuelReading
from fuel_telemetry.services import reading_pipeline
from fuel_telemetry.services.geometry import DerivedReading, derive_reading
from fuel_telemetry.services.reading_pipeline import ReadingPipeline, build_fuel_level_event
from fuel_telemetry.services.repository import TankRepository
from fuel_telemetry.services.sensor_simulation import SensorSimulator
from fuel_telemetry.services.status import FuelStatus
from tests.helpers import FixedDistanceSimulator


def drain(subscription):
    events = []
    while True:
        event = subscription.get_nowait()
        if event is None:
            return events
        events.append(event)


def reading_count(db) -> int:
    return db.query(FuelReading).count()


@pytest.fixture
def subscription(broadcaster):
    with broadcaster.subscribe() as subscription:
        yield subscription


def test_initialize_creates_first_reading_and_publishes(db, repository, broadcaster, subscription, tank) -> None:
    pipeline = ReadingPipeline(repository, FixedDistanceSimulator(initial=200.0), broadcaster)

    reading = pipeline.initialize(tank)

    assert reading.fuel_level_percentage == 50.0
    assert reading_count(db) == 1
    events = drain(subscription)
    assert len(events) == 1
    assert events[0].data.tank_id == "T1"
    assert events[0].data.status == FuelStatus.NORMAL


def test_initialize_skips_tank_with_readings(db, repository, broadcaster, subscription, tank) -> None:
    pipeline = ReadingPipeline(repository, FixedDistanceSimulator(initial=200.0), broadcaster)
    pipeline.initialize(tank)
    drain(subscription)

    assert pipeline.initialize(tank) is None
    assert reading_count(db) == 1
    assert drain(subscription) == []


def test_initial_level_between_20_and_80_percent(db, repository, broadcaster, tank) -> None:
    pipeline = ReadingPipeline(repository, SensorSimulator(rng=random.Random(5)), broadcaster)

    reading = pipeline.initialize(tank)

    assert 20.0 <= reading.fuel_level_percentage <= 80.0
    assert reading_count(db) == 1


def test_initialize_all(repository, broadcaster, tank) -> None:
    repository.create_tank(tank_id="T2", name="Backup", diameter=2.0, height=3.5)
    pipeline = ReadingPipeline(repository, FixedDistanceSimulator(initial=100.0), broadcaster)

    assert pipeline.initialize_all() == 2
    assert pipeline.initialize_all() == 0


def test_tick_without_history_assumes_half_full(db, repository, broadcaster, subscription, tank) -> None:
    simulator = FixedDistanceSimulator(210.0)
    pipeline = ReadingPipeline(repository, simulator, broadcaster)

    reading = pipeline.tick(tank)

    assert simulator.calls == [("T1", 2.0, 4.0)]
    assert reading.fuel_height == 1.9
    assert len(drain(subscription)) == 1


def test_tick_continues_from_latest_height(repository, broadcaster, tank) -> None:
    simulator = FixedDistanceSimulator(150.0, 160.0)
    pipeline = ReadingPipeline(repository, simulator, broadcaster)

    pipeline.tick(tank)
    pipeline.tick(tank)

    assert simulator.calls[1] == ("T1", 2.5, 4.0)


def test_tick_always_stores_but_only_publishes_significant_changes(db, repository, broadcaster, subscription, tank) -> None:
    # 50% -> ~49.93% (noise) -> 52.5% (real change)
    simulator = FixedDistanceSimulator(200.3, 190.0, initial=200.0)
    pipeline = ReadingPipeline(repository, simulator, broadcaster)
    pipeline.initialize(tank)
    drain(subscription)

    quiet = pipeline.tick(tank)
    assert reading_count(db) == 2
    assert drain(subscription) == []

    loud = pipeline.tick(tank)
    assert reading_count(db) == 3
    events = drain(subscription)
    assert len(events) == 1
    assert events[0].data.fuel_level_percentage == loud.fuel_level_percentage
    assert abs(loud.fuel_level_percentage - quiet.fuel_level_percentage) > 0.1


def test_manual_trigger_unknown_tank(db, repository, broadcaster, subscription, tank) -> None:
    pipeline = ReadingPipeline(repository, FixedDistanceSimulator(200.0), broadcaster)

    with pytest.raises(NotFoundError):
        pipeline.trigger_manual_reading("NON-EXISTENT")

    assert reading_count(db) == 0
    assert drain(subscription) == []


def test_manual_trigger_returns_persisted_reading(repository, broadcaster, tank) -> None:
    pipeline = ReadingPipeline(repository, FixedDistanceSimulator(120.0), broadcaster)

    reading = pipeline.trigger_manual_reading("T1")

    assert reading.id == repository.latest_reading("T1").id
    assert reading.fuel_height == 2.8
    assert reading.fuel_level_percentage == 70.0


class BrokenTankSimulator(FixedDistanceSimulator):
    def simulate_sensor_reading(self, tank_id, current_fuel_height, tank_height):
        if tank_id == "T1":
            raise RuntimeError("sensor offline")
        return super().simulate_sensor_reading(tank_id, current_fuel_height, tank_height)


def test_automated_cycle_isolates_failing_tank(db, repository, broadcaster, tank) -> None:
    repository.create_tank(tank_id="T2", name="Backup", diameter=2.0, height=3.5)
    pipeline = ReadingPipeline(repository, BrokenTankSimulator(175.0), broadcaster)

    assert pipeline.automated_cycle() == 1
    assert repository.latest_reading("T1") is None
    assert repository.latest_reading("T2").fuel_height == 1.75


class FailingRepository(TankRepository):
    def save_reading(self, tank_id, derived):
        raise PersistenceError("disk full")


def test_nothing_published_when_save_fails(db, broadcaster, subscription, tank) -> None:
    pipeline = ReadingPipeline(FailingRepository(db), FixedDistanceSimulator(200.0), broadcaster)

    with pytest.raises(PersistenceError):
        pipeline.tick(tank)

    assert drain(subscription) == []


def test_event_payload(repository, tank) -> None:
    reading = repository.save_reading(tank.id, derive_reading(380.0, tank))
    event = build_fuel_level_event(tank, reading)

    payload = event.model_dump(by_alias=True, mode="json")
    assert payload["type"] == "fuel_level_update"
    assert payload["data"]["tankId"] == "T1"
    assert payload["data"]["tankName"] == "Main Storage Tank A"
    assert payload["data"]["fuelLevelPercentage"] == 5.0
    assert payload["data"]["tankCapacity"] == pytest.approx(19634.95, abs=0.01)
    assert payload["data"]["status"] == "critical"
    assert set(payload["data"]) == {
        "tankId", "tankName", "fuelLevelLiters", "fuelLevelPercentage", "fuelHeight",
        "distanceToFuel", "tankCapacity", "timestamp", "status",
    }


def test_out_of_bounds_reading_is_logged_and_still_stored(db, repository, broadcaster, subscription, tank, monkeypatch, caplog) -> None:
    impossible = DerivedReading(distance_to_fuel=0.0, fuel_height=4.0, fuel_level_liters=19634.95, fuel_level_percentage=100.5)
    monkeypatch.setattr(reading_pipeline, "derive_reading", lambda distance, tank: impossible)
    pipeline = ReadingPipeline(repository, FixedDistanceSimulator(0.0), broadcaster)

    with caplog.at_level(logging.WARNING, logger="fuel_telemetry.services.reading_pipeline"):
        reading = pipeline.tick(tank)

    assert reading.fuel_level_percentage == 100.5
    assert reading_count(db) == 1
    assert len(drain(subscription)) == 1
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "outside [0, 100]" in warnings[0].getMessage()


class BrokenInitialSimulator(FixedDistanceSimulator):
    def get_initial_fuel_level(self, tank_height):
        if tank_height == 4.0:
            raise RuntimeError("sensor offline")
        return super().get_initial_fuel_level(tank_height)


def test_initialize_all_isolates_failing_tank(repository, broadcaster, tank) -> None:
    repository.create_tank(tank_id="T2", name="Backup", diameter=2.0, height=3.5)
    pipeline = ReadingPipeline(repository, BrokenInitialSimulator(initial=175.0), broadcaster)

    assert pipeline.initialize_all() == 1
    assert repository.latest_reading("T1") is None
    assert repository.latest_reading("T2").fuel_height == 1.75


def test_event_timestamp_is_utc(repository, tank) -> None:
    reading = repository.save_reading(tank.id, derive_reading(200.0, tank))

    payload = build_fuel_level_event(tank, reading).model_dump(by_alias=True, mode="json")
    assert payload["data"]["timestamp"].endswith("Z")
