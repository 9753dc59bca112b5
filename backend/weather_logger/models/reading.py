"""
Reading Models
==============
Pydantic models for weather station data validation and serialization.

This module defines all data structures used throughout the application:
- Request models: What a weather station sends to the backend
- Response models: What the backend returns to the dashboard
- Aggregate models: Window statistics and the device list

WHAT'S IN A READING:
1. Temperature - degrees Celsius from the DHT sensor
2. Humidity - relative humidity %
3. Rainfall - wetness of the rain sensor plate, 0-100 %
4. Light level - free text from the light sensor ("Bright" / "Dark")
5. Device ID - which station sent it
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


# Station firmware uses this ID unless it's been renamed
DEFAULT_DEVICE_ID = "weather_station_01"

# Fields every station has to send with each reading
REQUIRED_READING_FIELDS = ["temperature", "humidity", "rainfall", "light_level"]

# Fields that have to be numbers
NUMERIC_READING_FIELDS = ["temperature", "humidity", "rainfall"]


# =============================================================================
# REQUEST MODELS - What a station sends to the backend
# =============================================================================

class ReadingCreate(BaseModel):
    """
    Request body for POST /api/data.

    The station firmware posts one of these every upload cycle.
    Extra fields (the firmware also sends "pressure") are ignored.

    Example Request:
        POST /api/data
        {
            "temperature": 23.4,
            "humidity": 61.0,
            "rainfall": 12,
            "light_level": "Bright",
            "device_id": "weather_station_01"
        }
    """
    temperature: float = Field(
        ...,
        description="Air temperature in °C",
        examples=[23.4]
    )
    humidity: float = Field(
        ...,
        description="Relative humidity %",
        examples=[61.0]
    )
    rainfall: int = Field(
        ...,
        description="Rain sensor wetness %",
        examples=[12]
    )
    light_level: str = Field(
        ...,
        description="Light sensor state",
        max_length=50,
        examples=["Bright", "Dark"]
    )
    device_id: Optional[str] = Field(
        None,
        description=f"Reporting station ID (defaults to {DEFAULT_DEVICE_ID})",
        max_length=100,
        examples=[DEFAULT_DEVICE_ID]
    )


# =============================================================================
# RESPONSE MODELS - What backend returns to the dashboard
# =============================================================================

class Reading(BaseModel):
    """
    One stored sensor sample, exactly as it sits in the database.

    Timestamps are UTC. The dashboard charts use `timestamp`;
    `created_at` is when the row was written.
    """
    id: int = Field(..., description="Row ID")
    timestamp: datetime = Field(..., description="When the reading was taken (UTC)")
    temperature: Optional[float] = Field(None, description="Temperature in °C")
    humidity: Optional[float] = Field(None, description="Relative humidity %")
    rainfall: Optional[int] = Field(None, description="Rain sensor wetness %")
    light_level: Optional[str] = Field(None, description="Light sensor state")
    device_id: str = Field(..., description="Reporting station ID")
    created_at: Optional[datetime] = Field(None, description="When the row was stored (UTC)")

    def to_csv_row(self) -> list:
        """Convert reading to a CSV row (same order as csv_header)."""
        return [
            self.timestamp.isoformat(),
            self.temperature,
            self.humidity,
            self.rainfall,
            self.light_level,
            self.device_id,
        ]

    @staticmethod
    def csv_header() -> list:
        """Return CSV header row."""
        return ["Timestamp", "Temperature", "Humidity", "Rainfall", "Light Level", "Device ID"]


class IngestResponse(BaseModel):
    """Returned by POST /api/data when a reading has been stored."""
    success: bool = Field(default=True)
    message: str = Field(default="Data received successfully")
    id: int = Field(..., description="Row ID of the stored reading")
    timestamp: datetime = Field(..., description="Server time the reading was stored (UTC)")


class StatsResponse(BaseModel):
    """
    Aggregates over a window of readings.

    Everything except the counts is rounded to 2 decimals.
    If the window is empty the aggregates are null and the counts are 0.
    """
    avg_temp: Optional[float] = None
    min_temp: Optional[float] = None
    max_temp: Optional[float] = None
    avg_humidity: Optional[float] = None
    min_humidity: Optional[float] = None
    max_humidity: Optional[float] = None
    avg_rainfall: Optional[float] = None
    total_readings: int = 0
    device_count: int = 0
    hours: int = Field(..., description="Window size in hours")
    device_id: Optional[str] = Field(None, description="Device filter, if one was applied")


class DeviceSummary(BaseModel):
    """One row of GET /api/devices."""
    device_id: str
    reading_count: int
    first_seen: datetime
    last_seen: datetime


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str
    database: str
    total_records: Optional[int] = None
    uptime: float = Field(..., description="Seconds since the server started")
    environment: str
    timestamp: datetime
