import math
from dataclasses import dataclass
from typing import Protocol

from fuel_telemetry.exceptions import SimulationInvariantViolation


class TankGeometry(Protocol):
    diameter: float
    height: float
    capacity: float
    sensor_height: float


@dataclass(frozen=True)
class DerivedReading:
    """Physical quantities derived from one raw sensor distance, already rounded."""
    distance_to_fuel: float  # cm
    fuel_height: float  # m
    fuel_level_liters: float
    fuel_level_percentage: float


def calculate_cylindrical_volume(fuel_height: float, diameter: float) -> float:
    """Volume in liters of a vertical cylinder filled to `fuel_height` meters."""
    radius = diameter / 2
    return math.pi * radius ** 2 * fuel_height * 1000


def calculate_tank_capacity(diameter: float, height: float) -> float:
    return calculate_cylindrical_volume(height, diameter)


def derive_reading(distance_to_fuel_cm: float, tank: TankGeometry) -> DerivedReading:
    """
    Convert a raw sensor distance into fuel height, volume and percentage.

    The sensor sits at `tank.sensor_height` and measures downward to the fuel
    surface. Height is clamped to the tank so sensor noise can never produce
    negative or overflowing fuel. Percentage is relative to the stored capacity,
    which is rounded independently of the geometry, so it is clamped too.
    """
    distance_m = distance_to_fuel_cm / 100
    fuel_height = tank.sensor_height - distance_m
    fuel_height = max(0.0, min(fuel_height, tank.height))

    liters = calculate_cylindrical_volume(fuel_height, tank.diameter)
    percentage = (liters / tank.capacity) * 100 if tank.capacity > 0 else 0.0
    percentage = max(0.0, min(percentage, 100.0))

    return DerivedReading(
        distance_to_fuel=round(distance_to_fuel_cm, 2),
        fuel_height=round(fuel_height, 3),
        fuel_level_liters=round(liters, 2),
        fuel_level_percentage=round(percentage, 2),
    )


def check_reading_bounds(reading: DerivedReading, tank: TankGeometry) -> None:
    """Raise SimulationInvariantViolation if a derived reading is physically impossible."""
    if not 0 <= reading.fuel_height <= tank.height:
        raise SimulationInvariantViolation(
            f"fuel height {reading.fuel_height} outside [0, {tank.height}]"
        )
    if not 0 <= reading.fuel_level_percentage <= 100:
        raise SimulationInvariantViolation(
            f"fuel percentage {reading.fuel_level_percentage} outside [0, 100]"
        )
