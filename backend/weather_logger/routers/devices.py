"""
Devices API Router
==================

Which weather stations have talked to us?

There's no device registration - a station "exists" as soon as it has
posted its first reading. This router just summarizes what's in the table.

Endpoint:
  GET /api/devices - Every station with its reading count, first and last seen time.
"""

from fastapi import APIRouter, Depends

from weather_logger.models import DeviceSummary
from weather_logger.routers.readings import get_reading_store

router = APIRouter(prefix="/api/devices", tags=["devices"])


@router.get("", response_model=list[DeviceSummary])
def list_devices(store = Depends(get_reading_store)):
    """List every station that has reported, most recently seen first."""
    return store.get_devices()
