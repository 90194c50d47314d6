from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from fuel_telemetry.schemas.common import UtcDatetime


class FuelReadingResponse(BaseModel):
    id: str
    tank_id: str
    distance_to_fuel: float
    fuel_height: float
    fuel_level_liters: float
    fuel_level_percentage: float
    timestamp: UtcDatetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
