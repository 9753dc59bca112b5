"""
Reading Store
=============

This is where every weather reading ends up!

WHAT IT DOES:
------------
1. Keeps all readings in ONE SQLite table (sensor_data)
2. Inserts validated readings as they arrive from stations
3. Answers the dashboard's questions:
   - What's the latest reading?
   - What happened in the last N hours?
   - What were the min/avg/max over that window?
   - Which stations have reported, and when?

THE TABLE:
---------
    sensor_data
    -----------
    id          INTEGER   primary key
    timestamp   DATETIME  when the reading was taken (UTC)
    temperature REAL      °C
    humidity    REAL      %
    rainfall    INTEGER   rain sensor wetness %
    light_level TEXT      "Bright" / "Dark"
    device_id   TEXT      which station sent it
    created_at  DATETIME  when the row was written (UTC)

There are two plain indexes (timestamp and device_id) and that's it.
No rollups, no caching - every question is one parameterized SQL query.

TIME WINDOWS:
------------
SQLite stores timestamps as "YYYY-MM-DD HH:MM:SS" text in UTC, so
"the last 24 hours" is simply:

    timestamp >= datetime('now', '-24 hours')

The "-24 hours" part is passed as a bound parameter, never pasted into SQL.
"""

import logging
import math
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from weather_logger.models import (
    DEFAULT_DEVICE_ID,
    ReadingCreate,
    Reading,
    StatsResponse,
    DeviceSummary,
)
from weather_logger.utils.validation import validate_window_hours, clamp_limit

logger = logging.getLogger(__name__)


SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SCHEMA = [
    """CREATE TABLE IF NOT EXISTS sensor_data (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
        temperature REAL,
        humidity REAL,
        rainfall INTEGER,
        light_level TEXT,
        device_id TEXT DEFAULT 'weather_station_01',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )""",
    "CREATE INDEX IF NOT EXISTS idx_timestamp ON sensor_data(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_device_id ON sensor_data(device_id)",
]

# Everything except the counts gets rounded in stats
COUNT_COLUMNS = ("total_readings", "device_count")


class StorageError(Exception):
    """Raised when the database can't do what we asked."""


def parse_db_timestamp(value) -> Optional[datetime]:
    """Turn SQLite's "YYYY-MM-DD HH:MM:SS" text into a UTC datetime."""
    if value is None:
        return None
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def format_db_timestamp(value: datetime) -> str:
    """Turn a datetime into the text format SQLite's datetime() produces."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(SQLITE_TIMESTAMP_FORMAT)


def window_modifier(hours: int) -> str:
    """Build the datetime('now', ?) modifier for a window of `hours` hours."""
    return f"-{int(hours)} hours"


def round_half_up(value: float, places: int = 2) -> float:
    """Round to `places` decimals with halves going up (20.125 -> 20.13)."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


class ReadingStore:
    """
    The SQLite store for all weather readings.

    HOW TO USE:
    ----------
    store = ReadingStore("data/weather_data.db")
    store.initialize()

    row_id, stored_at = store.add_reading(ReadingCreate(
        temperature=23.4, humidity=61.0, rainfall=12, light_level="Bright"
    ))

    latest = store.get_latest()
    history = store.get_history(hours=24, limit=100)
    stats = store.get_stats(hours=24)

    store.close()

    One connection is shared by the whole app. Requests are tiny, so a
    lock around each query is all the coordination we need.
    """

    def __init__(self, db_path):
        """
        Set up the store.

        Args:
            db_path: Where the SQLite file lives. The folder is created
                     by initialize() if it doesn't exist yet.
        """
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()


    # =========================================================================
    # CONNECTION
    # =========================================================================

    def initialize(self):
        """Open the database and create the table + indexes (safe to call twice)."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.db_path.parent}: {e}") from e

        try:
            if self._conn is None:
                self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
            with self._lock:
                for statement in SCHEMA:
                    self._conn.execute(statement)
                self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database at {self.db_path}: {e}") from e

        logger.info(f"Connected to SQLite database at {self.db_path}")


    def close(self):
        """Close the connection. The store can be initialized again later."""
        if self._conn is None:
            return
        with self._lock:
            try:
                self._conn.close()
            except sqlite3.Error as e:
                raise StorageError(f"Error closing database: {e}") from e
            finally:
                self._conn = None
        logger.info("Database connection closed")


    def _fetch(self, query: str, params=(), one: bool = False):
        """Run a read query and return one row or all rows."""
        if self._conn is None:
            raise StorageError("Database is not open")
        try:
            with self._lock:
                cursor = self._conn.execute(query, params)
                return cursor.fetchone() if one else cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e


    # =========================================================================
    # WRITING
    # =========================================================================

    def add_reading(self, reading: ReadingCreate, recorded_at: Optional[datetime] = None):
        """
        Store one reading.

        Args:
            reading: The validated reading from a station
            recorded_at: Optional explicit time of the reading (for backfills).
                         Defaults to "now" in the database clock.

        Returns:
            (row id, timestamp the reading was stored with)
        """
        if self._conn is None:
            raise StorageError("Database is not open")

        device_id = reading.device_id or DEFAULT_DEVICE_ID
        values = (reading.temperature, reading.humidity, reading.rainfall, reading.light_level, device_id)

        try:
            with self._lock:
                if recorded_at is None:
                    cursor = self._conn.execute(
                        """INSERT INTO sensor_data
                        (temperature, humidity, rainfall, light_level, device_id)
                        VALUES (?, ?, ?, ?, ?)""",
                        values,
                    )
                else:
                    cursor = self._conn.execute(
                        """INSERT INTO sensor_data
                        (temperature, humidity, rainfall, light_level, device_id, timestamp)
                        VALUES (?, ?, ?, ?, ?, ?)""",
                        values + (format_db_timestamp(recorded_at),),
                    )
                row_id = cursor.lastrowid
                stored = self._conn.execute(
                    "SELECT timestamp FROM sensor_data WHERE id = ?", (row_id,)
                ).fetchone()
                self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

        return row_id, parse_db_timestamp(stored["timestamp"])


    # =========================================================================
    # READING
    # =========================================================================

    def get_latest(self, device_id: Optional[str] = None) -> Optional[Reading]:
        """Newest reading overall, or for one station."""
        query = "SELECT * FROM sensor_data"
        params = []

        if device_id:
            query += " WHERE device_id = ?"
            params.append(device_id)

        query += " ORDER BY timestamp DESC, id DESC LIMIT 1"

        row = self._fetch(query, params, one=True)
        return self._to_reading(row) if row else None


    def get_history(
        self,
        hours: int = 24,
        limit: int = 100,
        device_id: Optional[str] = None
    ) -> list[Reading]:
        """
        Readings from the last `hours` hours, newest first.

        Args:
            hours: Window size (1 hour up to a year)
            limit: Max rows to return - anything over 1000 is capped at 1000
            device_id: Only this station (optional)

        Raises:
            ValueError: hours or limit out of range
        """
        if not validate_window_hours(hours):
            raise ValueError(f"hours must be between 1 and a year, got {hours}")
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        query = "SELECT * FROM sensor_data WHERE timestamp >= datetime('now', ?)"
        params: list = [window_modifier(hours)]

        if device_id:
            query += " AND device_id = ?"
            params.append(device_id)

        query += " ORDER BY timestamp DESC, id DESC LIMIT ?"
        params.append(clamp_limit(limit))

        return [self._to_reading(row) for row in self._fetch(query, params)]


    def get_stats(self, hours: int = 24, device_id: Optional[str] = None) -> StatsResponse:
        """
        Min/avg/max over the last `hours` hours.

        Averages and extremes are rounded half up to 2 decimals. An empty window gives
        nulls for the aggregates and 0 for the counts.
        """
        if not validate_window_hours(hours):
            raise ValueError(f"hours must be between 1 and a year, got {hours}")

        query = """SELECT
            AVG(temperature) AS avg_temp,
            MIN(temperature) AS min_temp,
            MAX(temperature) AS max_temp,
            AVG(humidity) AS avg_humidity,
            MIN(humidity) AS min_humidity,
            MAX(humidity) AS max_humidity,
            AVG(rainfall) AS avg_rainfall,
            COUNT(*) AS total_readings,
            COUNT(DISTINCT device_id) AS device_count
            FROM sensor_data
            WHERE timestamp >= datetime('now', ?)"""
        params: list = [window_modifier(hours)]

        if device_id:
            query += " AND device_id = ?"
            params.append(device_id)

        row = dict(self._fetch(query, params, one=True))

        for key, value in row.items():
            if key not in COUNT_COLUMNS and isinstance(value, (int, float)):
                row[key] = round_half_up(value)

        return StatsResponse(**row, hours=hours, device_id=device_id or None)


    def get_devices(self) -> list[DeviceSummary]:
        """Every station that has ever reported, most recently seen first."""
        rows = self._fetch(
            """SELECT
            device_id,
            COUNT(*) AS reading_count,
            MAX(timestamp) AS last_seen,
            MIN(timestamp) AS first_seen
            FROM sensor_data
            GROUP BY device_id
            ORDER BY last_seen DESC"""
        )
        return [
            DeviceSummary(
                device_id=row["device_id"],
                reading_count=row["reading_count"],
                first_seen=parse_db_timestamp(row["first_seen"]),
                last_seen=parse_db_timestamp(row["last_seen"]),
            )
            for row in rows
        ]


    def count_readings(self) -> int:
        """Total number of stored readings."""
        return self._fetch("SELECT COUNT(*) AS count FROM sensor_data", one=True)["count"]


    @staticmethod
    def _to_reading(row: sqlite3.Row) -> Reading:
        data = dict(row)
        data["timestamp"] = parse_db_timestamp(data["timestamp"])
        data["created_at"] = parse_db_timestamp(data["created_at"])
        return Reading(**data)
