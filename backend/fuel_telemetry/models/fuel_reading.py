import uuid
from sqlalchemy import Column, Float, DateTime, ForeignKey, Integer, String, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from fuel_telemetry.database import Base


def _new_reading_id() -> str:
    return str(uuid.uuid4())


class FuelReading(Base):
    """One derived fuel level observation. Rows are append-only."""
    __tablename__ = "fuel_readings"

    id = Column(String(36), primary_key=True, default=_new_reading_id)
    tank_id = Column(String(50), ForeignKey("tanks.id", ondelete="CASCADE"), nullable=False, index=True)
    distance_to_fuel = Column(Float, nullable=False)  # cm, sensor to fuel surface
    fuel_height = Column(Float, nullable=False)  # meters
    fuel_level_liters = Column(Float, nullable=False)
    fuel_level_percentage = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    sequence = Column(Integer, nullable=False, default=1)  # per tank, breaks timestamp ties

    # Relationships
    tank = relationship("Tank", back_populates="readings")

    # Latest-reading lookups are per tank ordered by time
    __table_args__ = (
        Index('ix_fuel_readings_tank_timestamp', 'tank_id', 'timestamp'),
    )

    def __repr__(self):
        return (
            f"<FuelReading(id='{self.id}', tank_id='{self.tank_id}', "
            f"percentage={self.fuel_level_percentage})>"
        )
