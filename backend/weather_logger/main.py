"""
Weather Station Logger - Backend API
====================================
FastAPI application that collects readings from IoT weather stations and
serves them to a browser dashboard.

ARCHITECTURE:
    Stations POST a small JSON reading every upload cycle. Every reading
    goes into one SQLite table. The dashboard polls the read endpoints on
    a timer and draws charts and tables from the JSON.

    [Weather Station] --POST /api/data--> [This Backend] ---> [SQLite]
                                                 ^
                                                 |
    [Browser Dashboard] --GET /api/latest, /api/history, /api/stats--

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config (optional - defaults work locally)
    cp env.example.txt .env

    # Run the server
    weather-logger
    # or: uvicorn weather_logger.main:app --reload --port 3022

    # Feed it fake readings (in another terminal)
    weather-station-sim --url http://localhost:3022 --interval 5

API DOCUMENTATION:
    After starting the server, visit:
    - Dashboard: http://localhost:3022/
    - Swagger UI: http://localhost:3022/docs
    - ReDoc: http://localhost:3022/redoc
"""

import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

from weather_logger import __version__
from weather_logger.models import (
    HealthResponse,
    REQUIRED_READING_FIELDS,
    NUMERIC_READING_FIELDS,
)
from weather_logger.routers import (
    readings_router,
    devices_router,
    set_reading_store,
    get_reading_store,
)
from weather_logger.services import ReadingStore, StorageError


# Load environment variables from .env file
load_dotenv()


BACKEND_DIR = Path(__file__).resolve().parent.parent
STATIC_DIR = Path(__file__).resolve().parent / "static"


# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        PORT: Port to listen on (default: 3022)
        HOST: Interface to bind (default: 0.0.0.0)
        DB_PATH: SQLite file (default: backend/data/weather_data.db)
        APP_ENV: development / production, shown in /health
        CORS_ORIGINS: Comma-separated allowed origins (default: * = anyone)
        LOG_LEVEL: Python logging level (default: INFO)
    """

    PORT = int(os.getenv("PORT", "3022"))
    HOST = os.getenv("HOST", "0.0.0.0")

    DB_PATH = os.getenv("DB_PATH", str(BACKEND_DIR / "data" / "weather_data.db"))

    APP_ENV = os.getenv("APP_ENV", "development")

    # Stations and dashboards can live anywhere, so CORS is open by default
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
    datefmt='%H:%M:%S',
    handlers=[logging.StreamHandler(sys.stderr)]
)
logger = logging.getLogger(__name__)

_started_at = time.monotonic()


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Open the SQLite database (creates folder, table and indexes)
        2. Inject the store into routers
        3. Print startup information

    SHUTDOWN:
        1. Stop handing the store to requests
        2. Close the database
    """
    # ========== STARTUP ==========
    store = ReadingStore(Config.DB_PATH)
    store.initialize()
    set_reading_store(store)

    print("=" * 60)
    print(f"Weather Station Logger running on port {Config.PORT}")
    print(f"   Dashboard:    http://localhost:{Config.PORT}/")
    print(f"   Ingestion:    http://localhost:{Config.PORT}/api/data")
    print(f"   Health check: http://localhost:{Config.PORT}/health")
    print(f"   Database:     {Config.DB_PATH}")
    print(f"   Environment:  {Config.APP_ENV}")
    print("=" * 60)

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    print("Shutting down...")
    set_reading_store(None)
    try:
        store.close()
    except StorageError as e:
        logger.error(f"Error closing database: {e}")
    print("Shutdown complete")


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

app = FastAPI(
    title="Weather Station Logger API",
    description="""
## Overview

Collects readings from IoT weather stations and serves them to the dashboard.

## How It Works

1. **A station posts a reading** - `POST /api/data` with temperature,
   humidity, rainfall and light level
2. **It's stored** - one row in SQLite
3. **The dashboard polls** - every 30 seconds it asks for the latest reading,
   the recent history and the 24 hour stats

## Reading Fields

| Field | Type | Range |
|-------|------|-------|
| **temperature** | number | -40 to 80 °C |
| **humidity** | number | 0 to 100 % |
| **rainfall** | integer | 0 to 100 % (rain sensor wetness) |
| **light_level** | text | e.g. Bright / Dark |
| **device_id** | text | optional, defaults to weather_station_01 |
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials="*" not in Config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request: METHOD /path - client address."""
    client = request.client.host if request.client else "-"
    logger.info(f"{request.method} {request.url.path} - {client}")
    return await call_next(request)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Turn FastAPI's 422 validation errors into 400s the stations understand.

    - A required reading field is missing -> "Missing required sensor data"
    - A reading number isn't a number    -> "Invalid numeric data"
    - Anything else (bad query params)   -> "Invalid request data"
    """
    errors = jsonable_encoder(exc.errors())
    body_errors = [e for e in errors if e.get("loc") and e["loc"][0] == "body"]

    if any(e.get("type") == "missing" for e in body_errors):
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Missing required sensor data",
                "required": REQUIRED_READING_FIELDS,
            },
        )

    if any(e["loc"][-1] in NUMERIC_READING_FIELDS for e in body_errors):
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid numeric data", "errors": errors},
        )

    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": errors},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    """Any database failure is a 500 - details go to the log, not the client."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

# Ingestion + window queries
app.include_router(readings_router)

# Station list
app.include_router(devices_router)

# Dashboard assets (script.js, style.css)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/", include_in_schema=False)
async def dashboard():
    """Serve the dashboard page."""
    return FileResponse(STATIC_DIR / "index.html")


@app.get(
    "/api",
    summary="API Information",
    description="Get basic API information and available endpoints."
)
async def api_info():
    """
    API overview.

    Returns links to all available endpoints.
    """
    return {
        "name": "Weather Station Logger API",
        "version": __version__,
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        },
        "endpoints": {
            "ingest": "POST /api/data",
            "latest": "GET /api/latest?device_id=",
            "history": "GET /api/history?hours=24&limit=100&device_id=",
            "stats": "GET /api/stats?hours=24&device_id=",
            "export": "GET /api/export?hours=168&limit=1000&device_id=",
            "devices": "GET /api/devices",
            "health": "GET /health",
            "dashboard": "GET /"
        }
    }


@app.get(
    "/health",
    summary="Health Check",
    description="Check if the backend and its database are up.",
    response_model=HealthResponse,
    responses={500: {"model": HealthResponse}},
)
def health(store = Depends(get_reading_store)):
    """Health check endpoint."""
    uptime = round(time.monotonic() - _started_at, 2)
    now = datetime.now(timezone.utc)

    try:
        total = store.count_readings()
    except StorageError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=500,
            content=jsonable_encoder(HealthResponse(
                status="ERROR",
                database="disconnected",
                uptime=uptime,
                environment=Config.APP_ENV,
                timestamp=now,
            )),
        )

    return HealthResponse(
        status="OK",
        database="connected",
        total_records=total,
        uptime=uptime,
        environment=Config.APP_ENV,
        timestamp=now,
    )


def run():
    """Console entry point: start uvicorn with the configured host/port."""
    import uvicorn

    uvicorn.run(
        "weather_logger.main:app",
        host=Config.HOST,
        port=Config.PORT,
        log_level=Config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
