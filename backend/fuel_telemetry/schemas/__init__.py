from fuel_telemetry.schemas.tank import TankBase, TankResponse
from fuel_telemetry.schemas.fuel_reading import FuelReadingResponse
from fuel_telemetry.schemas.fuel_event import FuelEventData, FuelLevelEvent

__all__ = [
    "TankBase", "TankResponse",
    "FuelReadingResponse",
    "FuelEventData", "FuelLevelEvent",
]
