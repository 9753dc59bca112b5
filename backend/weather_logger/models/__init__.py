"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from weather_logger.models import ReadingCreate, Reading
"""

from .reading import (
    # Defaults and field lists
    DEFAULT_DEVICE_ID,
    REQUIRED_READING_FIELDS,
    NUMERIC_READING_FIELDS,

    # What a station sends us
    ReadingCreate,

    # What we send back to the dashboard
    Reading,
    IngestResponse,
    StatsResponse,
    DeviceSummary,
    HealthResponse,
)

__all__ = [
    "DEFAULT_DEVICE_ID",
    "REQUIRED_READING_FIELDS",
    "NUMERIC_READING_FIELDS",
    "ReadingCreate",
    "Reading",
    "IngestResponse",
    "StatsResponse",
    "DeviceSummary",
    "HealthResponse",
]
