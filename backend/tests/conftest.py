import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fuel_telemetry.database import Base
from fuel_telemetry.services.event_bus import FuelLevelBroadcaster
from fuel_telemetry.services.repository import TankRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db):
    return TankRepository(db)


@pytest.fixture
def tank(repository):
    # Capacity computed from geometry: pi * 1.25^2 * 4 * 1000 ~= 19635 L
    return repository.create_tank(
        tank_id="T1",
        name="Main Storage Tank A",
        diameter=2.5,
        height=4.0,
        location="Building A - Ground Floor",
    )


@pytest.fixture
def broadcaster():
    return FuelLevelBroadcaster(max_queue=100)
