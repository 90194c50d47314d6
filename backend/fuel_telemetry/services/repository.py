from typing import List, Optional
from datetime import datetime, timedelta
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from fuel_telemetry.models import Tank, FuelReading
from fuel_telemetry.services.geometry import DerivedReading, calculate_tank_capacity
from fuel_telemetry.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class TankRepository:
    """Database access for tanks and their readings."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, error: SQLAlchemyError) -> PersistenceError:
        self.db.rollback()
        logger.error(f"Database error while trying to {action}: {error}")
        return PersistenceError(f"Could not {action}: {error}")

    def get_tank(self, tank_id: str) -> Optional[Tank]:
        try:
            return self.db.query(Tank).filter(Tank.id == tank_id).first()
        except SQLAlchemyError as e:
            raise self._fail(f"load tank {tank_id}", e) from e

    def list_tanks(self) -> List[Tank]:
        try:
            return self.db.query(Tank).order_by(Tank.created_at, Tank.id).all()
        except SQLAlchemyError as e:
            raise self._fail("list tanks", e) from e

    def create_tank(
        self,
        tank_id: str,
        name: str,
        diameter: float,
        height: float,
        capacity: Optional[float] = None,
        sensor_height: Optional[float] = None,
        location: Optional[str] = None,
    ) -> Tank:
        """Add a tank. Capacity defaults to the cylinder volume, sensor height to the tank height."""
        if diameter <= 0 or height <= 0:
            raise ValueError("Tank diameter and height must be positive")

        tank = Tank(
            id=tank_id,
            name=name,
            diameter=diameter,
            height=height,
            capacity=capacity if capacity is not None else calculate_tank_capacity(diameter, height),
            sensor_height=sensor_height if sensor_height is not None else height,
            location=location,
        )
        try:
            self.db.add(tank)
            self.db.commit()
            self.db.refresh(tank)
        except SQLAlchemyError as e:
            raise self._fail(f"create tank {tank_id}", e) from e
        return tank

    def latest_reading(self, tank_id: str) -> Optional[FuelReading]:
        try:
            return self.db.query(FuelReading).filter(
                FuelReading.tank_id == tank_id
            ).order_by(FuelReading.timestamp.desc(), FuelReading.sequence.desc()).first()
        except SQLAlchemyError as e:
            raise self._fail(f"load latest reading for tank {tank_id}", e) from e

    def readings_for_tank(self, tank_id: str, limit: int = 50) -> List[FuelReading]:
        try:
            return self.db.query(FuelReading).filter(
                FuelReading.tank_id == tank_id
            ).order_by(FuelReading.timestamp.desc(), FuelReading.sequence.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            raise self._fail(f"load readings for tank {tank_id}", e) from e

    def all_latest_readings(self) -> List[FuelReading]:
        latest = []
        for tank in self.list_tanks():
            reading = self.latest_reading(tank.id)
            if reading:
                latest.append(reading)
        return latest

    def save_reading(self, tank_id: str, derived: DerivedReading) -> FuelReading:
        """Persist a derived reading as the tank's next sequence number. Id and timestamp come from column defaults."""
        previous = self.latest_reading(tank_id)
        reading = FuelReading(
            tank_id=tank_id,
            sequence=previous.sequence + 1 if previous else 1,
            distance_to_fuel=derived.distance_to_fuel,
            fuel_height=derived.fuel_height,
            fuel_level_liters=derived.fuel_level_liters,
            fuel_level_percentage=derived.fuel_level_percentage,
        )
        try:
            self.db.add(reading)
            self.db.commit()
            self.db.refresh(reading)
        except SQLAlchemyError as e:
            raise self._fail(f"save reading for tank {tank_id}", e) from e
        return reading

    def cleanup_old_readings(self, days_to_keep: int = 30) -> int:
        """Delete readings older than `days_to_keep` days. Returns the number removed."""
        cutoff = datetime.utcnow() - timedelta(days=days_to_keep)
        try:
            deleted = self.db.query(FuelReading).filter(
                FuelReading.timestamp < cutoff
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("clean up old readings", e) from e
        return deleted
