from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging

from fuel_telemetry.config import settings
from fuel_telemetry.database import engine, Base
from fuel_telemetry.exceptions import NotFoundError, PersistenceError
from fuel_telemetry.api import fuel_tank
from fuel_telemetry.tasks.reading_jobs import (
    automated_readings_job,
    cleanup_old_readings_job,
    initialize_tanks,
)


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create scheduler
scheduler = AsyncIOScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting fuel tank telemetry service...")
    if settings.create_tables_on_startup:
        Base.metadata.create_all(bind=engine)

    if settings.initialize_tanks_on_startup:
        initialize_tanks()

    scheduler.add_job(
        automated_readings_job,
        'interval',
        minutes=settings.reading_interval_minutes,
        id='automated_readings',
        replace_existing=True,
        coalesce=True
    )
    scheduler.add_job(
        cleanup_old_readings_job,
        'cron',
        hour=3,
        minute=0,
        id='reading_retention_cleanup',
        replace_existing=True
    )
    scheduler.start()
    logger.info(f"Scheduled automated readings every {settings.reading_interval_minutes} minutes")

    yield
    # Shutdown
    logger.info("Shutting down fuel tank telemetry service...")
    scheduler.shutdown()


app = FastAPI(
    title="Fuel Tank Telemetry",
    description="Simulated fuel tank sensor readings with live level updates",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# Include routers
app.include_router(fuel_tank.router, prefix="/api/fuel-tank", tags=["Fuel Tank"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {"message": "Fuel Tank Telemetry API", "docs": "/docs"}


def run():
    import uvicorn
    uvicorn.run("fuel_telemetry.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
