"""
Readings API Router
===================

This is where the weather stations and the dashboard talk to us.

WHAT'S AN ENDPOINT?
------------------
An endpoint is like a door into our app. A station knocks on one door to
drop off a reading, the dashboard knocks on the others to read them back.

For example:
- POST /api/data    = "Here's a new reading from my station"
- GET  /api/latest  = "What's the weather right now?"
- GET  /api/history = "Show me the last 24 hours"

HOW IT WORKS:
------------
1. A station or the dashboard sends an HTTP request
2. FastAPI checks the JSON / query parameters against our models
3. We call the ReadingStore to do the work
4. We send back a response (JSON, or CSV for the export)

ALL ENDPOINTS:
-------------
POST   /api/data     - Store a reading from a station
GET    /api/latest   - Newest reading (?device_id=)
GET    /api/history  - Readings from the last N hours (?hours=&limit=&device_id=)
GET    /api/stats    - Min/avg/max over the last N hours (?hours=&device_id=)
GET    /api/export   - Same as history, but as a CSV download
"""

import csv
import io
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import Response

from weather_logger.models import (
    DEFAULT_DEVICE_ID,
    ReadingCreate,
    Reading,
    IngestResponse,
    StatsResponse,
)
from weather_logger.utils.validation import (
    MAX_WINDOW_HOURS,
    validate_temperature,
    validate_percentage,
    sanitize_filename,
)

logger = logging.getLogger(__name__)

# Create the router - this groups all our reading endpoints together
router = APIRouter(prefix="/api", tags=["readings"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================
# This is a fancy way of saying "give the endpoints access to the ReadingStore"

_reading_store = None  # This gets set when the app starts


def set_reading_store(store):
    """
    Called when the app starts (and stops) to hand us the reading store.

    Think of this like: "Hey router, here's your database to work with"
    """
    global _reading_store
    _reading_store = store


def get_reading_store():
    """
    Get the reading store for use in endpoints.

    Every endpoint function that needs the database uses this.
    """
    if _reading_store is None:
        raise HTTPException(status_code=503, detail="Server not fully started yet")
    return _reading_store


# Query parameters shared by the window endpoints
def window_hours(default: int):
    return Query(default, ge=1, le=MAX_WINDOW_HOURS, description="Window size in hours")


# =============================================================================
# INGESTION
# =============================================================================

@router.post("/data", response_model=IngestResponse)
def receive_reading(
    reading: ReadingCreate,
    store = Depends(get_reading_store)
):
    """
    Store one reading from a weather station.

    Send us:
    - temperature: °C (-40 to 80)
    - humidity: % (0 to 100)
    - rainfall: rain sensor wetness % (0 to 100)
    - light_level: whatever the light sensor says ("Bright" / "Dark")
    - device_id: which station you are (optional, defaults to weather_station_01)

    Anything else in the body (like "pressure") is ignored.
    """
    if not validate_temperature(reading.temperature):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid temperature: {reading.temperature}. Must be between -40 and 80 °C."
        )
    if not validate_percentage(reading.humidity):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid humidity: {reading.humidity}. Must be between 0 and 100 %."
        )
    if not validate_percentage(reading.rainfall):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid rainfall: {reading.rainfall}. Must be between 0 and 100 %."
        )

    row_id, stored_at = store.add_reading(reading)

    logger.info(
        f"New data received from {reading.device_id or DEFAULT_DEVICE_ID}: "
        f"T:{reading.temperature}°C H:{reading.humidity}% R:{reading.rainfall}% L:{reading.light_level}"
    )

    return IngestResponse(id=row_id, timestamp=stored_at)


# =============================================================================
# QUERIES
# =============================================================================

@router.get("/latest")
def get_latest_reading(
    device_id: Optional[str] = None,
    store = Depends(get_reading_store)
):
    """
    Get the newest reading.

    - /api/latest                          = newest from any station
    - /api/latest?device_id=weather_station_01 = newest from that station

    If nothing has been stored yet you get {"message": "No data available"}.
    """
    reading = store.get_latest(device_id)
    if reading is None:
        return {"message": "No data available"}
    return reading


@router.get("/history", response_model=list[Reading])
def get_history(
    hours: int = window_hours(24),
    limit: int = Query(100, ge=1, description="Max rows (capped at 1000)"),
    device_id: Optional[str] = None,
    store = Depends(get_reading_store)
):
    """
    Get readings from the last `hours` hours, newest first.

    Used by the dashboard charts and the history table.
    """
    return store.get_history(hours=hours, limit=limit, device_id=device_id)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    hours: int = window_hours(24),
    device_id: Optional[str] = None,
    store = Depends(get_reading_store)
):
    """
    Get min/avg/max temperature and humidity, average rainfall and
    reading/device counts over the last `hours` hours.
    """
    return store.get_stats(hours=hours, device_id=device_id)


@router.get("/export")
def export_csv(
    hours: int = window_hours(168),
    limit: int = Query(1000, ge=1, description="Max rows (capped at 1000)"),
    device_id: Optional[str] = None,
    store = Depends(get_reading_store)
):
    """
    Download readings as a CSV file.

    Defaults to the last week (168 hours), newest first.
    Columns: Timestamp, Temperature, Humidity, Rainfall, Light Level, Device ID
    """
    readings = store.get_history(hours=hours, limit=limit, device_id=device_id)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(Reading.csv_header())
    for reading in readings:
        writer.writerow(reading.to_csv_row())

    filename = "weather_data.csv"
    if device_id:
        filename = f"weather_data_{sanitize_filename(device_id)}.csv"

    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
