from fuel_telemetry.models.tank import Tank
from fuel_telemetry.models.fuel_reading import FuelReading

__all__ = [
    "Tank",
    "FuelReading",
]
