from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import AsyncIterator, Awaitable, Callable, List

from fuel_telemetry.config import settings
from fuel_telemetry.database import get_db
from fuel_telemetry.exceptions import NotFoundError
from fuel_telemetry.schemas import TankResponse, FuelReadingResponse
from fuel_telemetry.services.event_bus import FuelLevelBroadcaster, Subscription, get_broadcaster
from fuel_telemetry.services.reading_pipeline import build_reading_pipeline
from fuel_telemetry.services.repository import TankRepository

router = APIRouter()


@router.get("/tanks", response_model=List[TankResponse])
async def list_tanks(db: Session = Depends(get_db)):
    """List all tanks, oldest first."""
    return TankRepository(db).list_tanks()


@router.get("/tanks/{tank_id}", response_model=TankResponse)
async def get_tank(tank_id: str, db: Session = Depends(get_db)):
    tank = TankRepository(db).get_tank(tank_id)
    if not tank:
        raise NotFoundError(f"Tank {tank_id} not found")
    return tank


@router.get("/tanks/{tank_id}/latest", response_model=FuelReadingResponse)
async def get_latest_reading(tank_id: str, db: Session = Depends(get_db)):
    """Most recent reading for a tank."""
    reading = TankRepository(db).latest_reading(tank_id)
    if not reading:
        raise NotFoundError(f"No readings found for tank {tank_id}")
    return reading


@router.get("/tanks/{tank_id}/readings", response_model=List[FuelReadingResponse])
async def get_tank_readings(
    tank_id: str,
    limit: int = Query(50, ge=1, le=500, description="Number of readings to return, newest first"),
    db: Session = Depends(get_db)
):
    repository = TankRepository(db)
    if not repository.get_tank(tank_id):
        raise NotFoundError(f"Tank {tank_id} not found")
    return repository.readings_for_tank(tank_id, limit=limit)


@router.get("/latest", response_model=List[FuelReadingResponse])
async def get_all_latest_readings(db: Session = Depends(get_db)):
    """Latest reading of every tank that has one."""
    return TankRepository(db).all_latest_readings()


@router.post("/tanks/{tank_id}/trigger-reading", response_model=FuelReadingResponse)
async def trigger_manual_reading(
    tank_id: str,
    db: Session = Depends(get_db),
    broadcaster: FuelLevelBroadcaster = Depends(get_broadcaster)
):
    """Take a simulated reading now instead of waiting for the schedule."""
    return build_reading_pipeline(db, broadcaster).trigger_manual_reading(tank_id)


async def fuel_level_event_stream(
    subscription: Subscription,
    is_disconnected: Callable[[], Awaitable[bool]],
    keepalive_seconds: float,
) -> AsyncIterator[str]:
    """
    Server-sent event frames for one client.
    Sends a comment line when idle so proxies keep the connection open.
    """
    try:
        while not subscription.closed:
            if await is_disconnected():
                break
            event = await subscription.get(timeout=keepalive_seconds)
            if subscription.closed:
                break
            if event is None:
                yield ": keep-alive\n\n"
                continue
            yield f"event: {event.type}\ndata: {event.data.model_dump_json(by_alias=True)}\n\n"
    finally:
        subscription.close()


@router.get("/events")
async def stream_fuel_levels(
    request: Request,
    broadcaster: FuelLevelBroadcaster = Depends(get_broadcaster)
):
    """Live fuel level updates as server-sent events."""
    subscription = broadcaster.subscribe()
    return StreamingResponse(
        fuel_level_event_stream(subscription, request.is_disconnected, settings.event_keepalive_seconds),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
