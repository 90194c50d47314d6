from sqlalchemy import Column, String, DateTime, Float
from sqlalchemy.orm import relationship
from datetime import datetime
from fuel_telemetry.database import Base


class Tank(Base):
    """A vertical cylindrical fuel tank with an ultrasonic sensor mounted on top."""
    __tablename__ = "tanks"

    id = Column(String(50), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    diameter = Column(Float, nullable=False)  # meters
    height = Column(Float, nullable=False)  # meters
    capacity = Column(Float, nullable=False)  # liters
    sensor_height = Column(Float, nullable=False)  # meters, normally equal to height
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    readings = relationship(
        "FuelReading",
        back_populates="tank",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Tank(id='{self.id}', name='{self.name}')>"
