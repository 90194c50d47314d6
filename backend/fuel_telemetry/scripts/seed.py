"""
Recreate the demo tanks, each starting full.

    python -m fuel_telemetry.scripts.seed
"""
import logging

from fuel_telemetry.database import Base, SessionLocal, engine
from fuel_telemetry.models import Tank, FuelReading
from fuel_telemetry.services.geometry import calculate_tank_capacity, derive_reading
from fuel_telemetry.services.repository import TankRepository

logger = logging.getLogger(__name__)

DEMO_TANKS = [
    {
        "tank_id": "TANK-001",
        "name": "Main Storage Tank A",
        "diameter": 2.5,
        "height": 4.0,
        "location": "Building A - Ground Floor",
    },
    {
        "tank_id": "TANK-002",
        "name": "Backup Storage Tank B",
        "diameter": 2.0,
        "height": 3.5,
        "location": "Building B - Basement",
    },
    {
        "tank_id": "TANK-003",
        "name": "Emergency Reserve Tank",
        "diameter": 1.8,
        "height": 2.5,
        "location": "Emergency Bay",
    },
]


def seed_database(db) -> int:
    """Delete all tanks and readings, then create the demo tanks full."""
    db.query(FuelReading).delete()
    db.query(Tank).delete()
    db.commit()

    repository = TankRepository(db)
    for data in DEMO_TANKS:
        capacity = round(calculate_tank_capacity(data["diameter"], data["height"]))
        tank = repository.create_tank(capacity=capacity, **data)
        reading = repository.save_reading(tank.id, derive_reading(0.0, tank))
        logger.info(
            f"Created tank {tank.id} ({tank.name}) - "
            f"{reading.fuel_level_percentage:.0f}% full ({reading.fuel_level_liters:.0f}L)"
        )
    return len(DEMO_TANKS)


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        count = seed_database(session)
        logger.info(f"Seeding completed: {count} tanks")
    finally:
        session.close()


if __name__ == "__main__":
    main()
