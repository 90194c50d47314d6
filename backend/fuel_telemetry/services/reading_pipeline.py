from typing import Optional
import logging

from fuel_telemetry.models import Tank, FuelReading
from fuel_telemetry.schemas.fuel_event import FuelEventData, FuelLevelEvent
from fuel_telemetry.services.event_bus import FuelLevelBroadcaster, fuel_level_broadcaster
from fuel_telemetry.services.geometry import DerivedReading, derive_reading, check_reading_bounds
from fuel_telemetry.services.repository import TankRepository
from fuel_telemetry.services.sensor_simulation import SensorSimulator
from fuel_telemetry.services.status import classify_fuel_level
from fuel_telemetry.exceptions import NotFoundError, SimulationInvariantViolation

logger = logging.getLogger(__name__)

# Percentage points a reading must move before subscribers hear about it
SIGNIFICANT_CHANGE = 0.1

# Height fraction assumed for a tank with no readings yet
FALLBACK_FILL_RATIO = 0.5


class ReadingPipeline:
    """
    Produces simulated readings for tanks.

    simulate -> derive -> store -> publish. Every call stores exactly one
    reading; an event is published only after the store succeeds, and only
    when the reading is the tank's first or moved by more than
    SIGNIFICANT_CHANGE percentage points.
    """

    def __init__(
        self,
        repository: TankRepository,
        simulator: SensorSimulator,
        broadcaster: FuelLevelBroadcaster,
    ):
        self.repository = repository
        self.simulator = simulator
        self.broadcaster = broadcaster

    def initialize(self, tank: Tank) -> Optional[FuelReading]:
        """Give a tank without readings its first one. Returns None if it already has one."""
        if self.repository.latest_reading(tank.id):
            return None

        distance = self.simulator.get_initial_fuel_level(tank.height)
        reading = self._store(tank, distance)
        self._emit(tank, reading)

        logger.info(
            f"Initialized tank {tank.id} with initial fuel level: "
            f"{reading.fuel_level_percentage:.1f}%"
        )
        return reading

    def initialize_all(self) -> int:
        """Initialize every tank. One tank failing does not stop the others."""
        initialized = 0
        for tank in self.repository.list_tanks():
            try:
                if self.initialize(tank):
                    initialized += 1
            except Exception as e:
                logger.error(f"Error initializing tank {tank.id}: {e}")
        return initialized

    def tick(self, tank: Tank) -> FuelReading:
        """Simulate, store and maybe publish one reading for `tank`."""
        previous = self.repository.latest_reading(tank.id)
        current_height = previous.fuel_height if previous else tank.height * FALLBACK_FILL_RATIO

        distance = self.simulator.simulate_sensor_reading(tank.id, current_height, tank.height)
        reading = self._store(tank, distance)

        if is_significant_change(previous, reading):
            self._emit(tank, reading)
            logger.info(
                f"Tank {tank.id}: {reading.fuel_level_percentage:.1f}% "
                f"({reading.fuel_level_liters:.0f}L) - Status: "
                f"{classify_fuel_level(reading.fuel_level_percentage).value}"
            )
        return reading

    def automated_cycle(self) -> int:
        """Tick every tank. One tank failing does not stop the others. Returns successful ticks."""
        logger.info("Performing automated sensor readings for all tanks...")
        tanks = self.repository.list_tanks()

        completed = 0
        for tank in tanks:
            try:
                self.tick(tank)
                completed += 1
            except Exception as e:
                logger.error(f"Error generating reading for tank {tank.id}: {e}")

        logger.info(f"Completed readings for {completed}/{len(tanks)} tanks")
        return completed

    def trigger_manual_reading(self, tank_id: str) -> FuelReading:
        tank = self.repository.get_tank(tank_id)
        if not tank:
            raise NotFoundError(f"Tank {tank_id} not found")
        return self.tick(tank)

    def _store(self, tank: Tank, distance_to_fuel_cm: float) -> FuelReading:
        derived = derive_reading(distance_to_fuel_cm, tank)
        self._check_bounds(tank, derived)
        return self.repository.save_reading(tank.id, derived)

    def _check_bounds(self, tank: Tank, derived: DerivedReading) -> None:
        try:
            check_reading_bounds(derived, tank)
        except SimulationInvariantViolation as e:
            logger.warning(f"Tank {tank.id}: {e}")

    def _emit(self, tank: Tank, reading: FuelReading) -> None:
        self.broadcaster.publish(build_fuel_level_event(tank, reading))


def is_significant_change(previous: Optional[FuelReading], current: FuelReading) -> bool:
    if previous is None:
        return True
    return abs(current.fuel_level_percentage - previous.fuel_level_percentage) > SIGNIFICANT_CHANGE


def build_fuel_level_event(tank: Tank, reading: FuelReading) -> FuelLevelEvent:
    return FuelLevelEvent(
        data=FuelEventData(
            tank_id=tank.id,
            tank_name=tank.name,
            fuel_level_liters=reading.fuel_level_liters,
            fuel_level_percentage=reading.fuel_level_percentage,
            fuel_height=reading.fuel_height,
            distance_to_fuel=reading.distance_to_fuel,
            tank_capacity=tank.capacity,
            timestamp=reading.timestamp,
            status=classify_fuel_level(reading.fuel_level_percentage),
        )
    )


# Shared across requests and scheduled jobs
sensor_simulator = SensorSimulator()


def build_reading_pipeline(db, broadcaster: Optional[FuelLevelBroadcaster] = None) -> ReadingPipeline:
    """Wire a pipeline to a session and the shared simulator / broadcaster."""
    return ReadingPipeline(
        repository=TankRepository(db),
        simulator=sensor_simulator,
        broadcaster=broadcaster or fuel_level_broadcaster,
    )
