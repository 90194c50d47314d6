from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from fuel_telemetry.schemas.common import UtcDatetime
from typing import Literal

from fuel_telemetry.services.status import FuelStatus


class FuelEventData(BaseModel):
    tank_id: str
    tank_name: str
    fuel_level_liters: float
    fuel_level_percentage: float
    fuel_height: float
    distance_to_fuel: float
    tank_capacity: float
    timestamp: UtcDatetime
    status: FuelStatus

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FuelLevelEvent(BaseModel):
    """Snapshot pushed to live subscribers after a significant reading."""
    type: Literal["fuel_level_update"] = "fuel_level_update"
    data: FuelEventData
