from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from fuel_telemetry.schemas.common import UtcDatetime
from typing import Optional


class TankBase(BaseModel):
    name: str
    diameter: float
    height: float
    capacity: float
    sensor_height: float
    location: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TankResponse(TankBase):
    id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
