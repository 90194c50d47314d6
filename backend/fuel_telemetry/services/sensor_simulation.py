import enum
import logging
import random
from typing import Optional

logger = logging.getLogger(__name__)


class Scenario(str, enum.Enum):
    CONSUMPTION = "consumption"
    REFILL = "refill"
    STABLE = "stable"
    EMERGENCY = "emergency"


class SensorSimulator:
    """
    Generates ultrasonic distance readings for a tank.

    Each reading picks a scenario from the current fill level, moves the
    fuel surface accordingly and adds up to +/-1 cm of measurement noise.
    Low tanks favour refills and full tanks favour consumption, so levels
    oscillate instead of drifting to empty or full and staying there.

    Pass a seeded `random.Random` (or anything with a `random()` method)
    for reproducible output.
    """

    INITIAL_MIN_PERCENTAGE = 20
    INITIAL_MAX_PERCENTAGE = 80

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def simulate_sensor_reading(self, tank_id: str, current_fuel_height: float, tank_height: float) -> float:
        """Return the next raw sensor distance in centimeters."""
        scenario = self.determine_scenario(current_fuel_height, tank_height)
        logger.debug(f"Tank {tank_id}: scenario {scenario.value} at height {current_fuel_height:.3f}m")
        return self.generate_sensor_reading(scenario, current_fuel_height, tank_height)

    def determine_scenario(self, current_fuel_height: float, tank_height: float) -> Scenario:
        fuel_percentage = (current_fuel_height / tank_height) * 100
        draw = self.rng.random()

        if fuel_percentage < 10:
            return Scenario.REFILL if draw < 0.7 else Scenario.EMERGENCY

        if fuel_percentage < 25:
            return Scenario.REFILL if draw < 0.6 else Scenario.CONSUMPTION

        if fuel_percentage > 75:
            return Scenario.CONSUMPTION if draw < 0.8 else Scenario.STABLE

        if draw < 0.5:
            return Scenario.CONSUMPTION
        if draw < 0.8:
            return Scenario.STABLE
        return Scenario.REFILL

    def generate_sensor_reading(self, scenario: Scenario, current_fuel_height: float, tank_height: float) -> float:
        # Sensor is mounted at the top of the tank
        sensor_height = tank_height
        new_fuel_height = current_fuel_height

        if scenario == Scenario.CONSUMPTION:
            new_fuel_height = max(0.0, current_fuel_height - (0.005 + self.rng.random() * 0.025))
        elif scenario == Scenario.REFILL:
            new_fuel_height = min(tank_height, current_fuel_height + (0.02 + self.rng.random() * 0.08))
        elif scenario == Scenario.STABLE:
            fluctuation = (self.rng.random() - 0.5) * 0.01
            new_fuel_height = max(0.0, min(tank_height, current_fuel_height + fluctuation))
        elif scenario == Scenario.EMERGENCY:
            new_fuel_height = max(0.0, current_fuel_height - self.rng.random() * 0.005)

        distance_to_fuel = (sensor_height - new_fuel_height) * 100
        noise = (self.rng.random() - 0.5) * 2

        return max(0.0, min(sensor_height * 100, distance_to_fuel + noise))

    def get_initial_fuel_level(self, tank_height: float) -> float:
        """Distance in centimeters for a fresh tank filled to a random 20-80%."""
        span = self.INITIAL_MAX_PERCENTAGE - self.INITIAL_MIN_PERCENTAGE
        percentage = self.INITIAL_MIN_PERCENTAGE + self.rng.random() * span

        fuel_height = (percentage / 100) * tank_height
        return (tank_height - fuel_height) * 100
