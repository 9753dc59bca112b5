import pytest
from fastapi.testclient import TestClient

from weather_logger.main import app, Config
from weather_logger.models import ReadingCreate
from weather_logger.routers import get_reading_store
from weather_logger.services import ReadingStore


@pytest.fixture
def store(tmp_path):
    store = ReadingStore(tmp_path / "data" / "weather.db")
    store.initialize()
    yield store
    store.close()


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "DB_PATH", str(tmp_path / "api" / "weather.db"))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def api_store(client):
    """The store the running app is using (for backfilling old readings)."""
    return get_reading_store()


@pytest.fixture
def make_reading():
    def _make(**overrides):
        data = {
            "temperature": 21.5,
            "humidity": 55.0,
            "rainfall": 10,
            "light_level": "Bright",
            "device_id": "weather_station_01",
        }
        data.update(overrides)
        return ReadingCreate(**data)
    return _make
