"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .readings import router as readings_router, set_reading_store, get_reading_store
from .devices import router as devices_router

__all__ = [
    "readings_router",
    "devices_router",
    "set_reading_store",
    "get_reading_store",
]
