import logging
from fuel_telemetry.config import settings
from fuel_telemetry.database import SessionLocal
from fuel_telemetry.services.reading_pipeline import build_reading_pipeline
from fuel_telemetry.services.repository import TankRepository

logger = logging.getLogger(__name__)


async def automated_readings_job():
    """
    Scheduled job: take one simulated reading for every tank.
    Runs on the event loop so live subscribers are fed directly.
    """
    session = SessionLocal()
    try:
        build_reading_pipeline(session).automated_cycle()
    except Exception as e:
        logger.error(f"Automated readings job failed: {e}")
    finally:
        session.close()


def cleanup_old_readings_job():
    """Scheduled job: purge readings past the retention window."""
    logger.info(f"Removing readings older than {settings.reading_retention_days} days")
    session = SessionLocal()
    try:
        deleted = TankRepository(session).cleanup_old_readings(settings.reading_retention_days)
        logger.info(f"Removed {deleted} old readings")
    except Exception as e:
        logger.error(f"Reading cleanup job failed: {e}")
    finally:
        session.close()


def initialize_tanks():
    """Give every tank without readings its first one. Called once at startup."""
    session = SessionLocal()
    try:
        count = build_reading_pipeline(session).initialize_all()
        logger.info(f"Initialized {count} tanks without readings")
    except Exception as e:
        logger.error(f"Tank initialization failed: {e}")
    finally:
        session.close()
