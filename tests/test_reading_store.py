from datetime import datetime, timedelta, timezone

import pytest

from weather_logger.models import DEFAULT_DEVICE_ID
from weather_logger.services import ReadingStore, StorageError


def hours_ago(hours):
    return datetime.now(timezone.utc) - timedelta(hours=hours)


def test_initialize_creates_directory_and_is_idempotent(tmp_path):
    db_path = tmp_path / "nested" / "dir" / "weather.db"
    store = ReadingStore(db_path)
    store.initialize()
    store.initialize()

    assert db_path.exists()
    assert store.count_readings() == 0
    store.close()


def test_add_reading_returns_id_and_utc_timestamp(store, make_reading):
    row_id, stored_at = store.add_reading(make_reading())

    assert row_id == 1
    assert stored_at.tzinfo == timezone.utc
    assert abs((datetime.now(timezone.utc) - stored_at).total_seconds()) < 60


def test_add_reading_defaults_device_id(store, make_reading):
    store.add_reading(make_reading(device_id=None))
    store.add_reading(make_reading(device_id=""))

    devices = store.get_devices()
    assert [d.device_id for d in devices] == [DEFAULT_DEVICE_ID]
    assert devices[0].reading_count == 2


def test_add_reading_with_recorded_at(store, make_reading):
    when = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    _, stored_at = store.add_reading(make_reading(), recorded_at=when)

    assert stored_at == when
    assert store.get_latest().timestamp == when


def test_get_latest_empty(store):
    assert store.get_latest() is None


def test_get_latest_orders_by_timestamp_not_insert_order(store, make_reading):
    store.add_reading(make_reading(temperature=10.0), recorded_at=hours_ago(1))
    store.add_reading(make_reading(temperature=20.0), recorded_at=hours_ago(3))

    assert store.get_latest().temperature == 10.0


def test_get_latest_breaks_timestamp_ties_by_id(store, make_reading):
    when = hours_ago(1)
    store.add_reading(make_reading(temperature=10.0), recorded_at=when)
    store.add_reading(make_reading(temperature=11.0), recorded_at=when)

    assert store.get_latest().temperature == 11.0


def test_get_latest_for_device(store, make_reading):
    store.add_reading(make_reading(device_id="roof", temperature=15.0), recorded_at=hours_ago(2))
    store.add_reading(make_reading(device_id="garden", temperature=18.0), recorded_at=hours_ago(1))

    assert store.get_latest("roof").temperature == 15.0
    assert store.get_latest("garden").temperature == 18.0
    assert store.get_latest("nowhere") is None


def test_get_history_respects_window(store, make_reading):
    store.add_reading(make_reading(temperature=1.0), recorded_at=hours_ago(30))
    store.add_reading(make_reading(temperature=2.0), recorded_at=hours_ago(5))
    store.add_reading(make_reading(temperature=3.0), recorded_at=hours_ago(0.5))

    assert [r.temperature for r in store.get_history(hours=24)] == [3.0, 2.0]
    assert [r.temperature for r in store.get_history(hours=48)] == [3.0, 2.0, 1.0]
    assert [r.temperature for r in store.get_history(hours=1)] == [3.0]


def test_get_history_limit_and_device_filter(store, make_reading):
    for i in range(5):
        store.add_reading(make_reading(device_id="roof", temperature=float(i)), recorded_at=hours_ago(5 - i))
    store.add_reading(make_reading(device_id="garden"), recorded_at=hours_ago(0.1))

    roof = store.get_history(hours=24, limit=3, device_id="roof")
    assert [r.temperature for r in roof] == [4.0, 3.0, 2.0]
    assert all(r.device_id == "roof" for r in roof)

    assert len(store.get_history(hours=24, limit=5000)) == 6


def test_get_history_device_filter_is_parameterized(store, make_reading):
    store.add_reading(make_reading())

    assert store.get_history(device_id="x' OR '1'='1") == []


@pytest.mark.parametrize("hours,limit", [(0, 10), (-5, 10), (24 * 366, 10), (24, 0)])
def test_get_history_rejects_bad_window(store, hours, limit):
    with pytest.raises(ValueError):
        store.get_history(hours=hours, limit=limit)


def test_get_stats_aggregates_and_rounds(store, make_reading):
    store.add_reading(make_reading(temperature=20.0, humidity=50.0, rainfall=0, device_id="roof"))
    store.add_reading(make_reading(temperature=21.0, humidity=60.0, rainfall=10, device_id="roof"))
    store.add_reading(make_reading(temperature=22.5, humidity=65.0, rainfall=20, device_id="garden"))
    store.add_reading(make_reading(temperature=-10.0), recorded_at=hours_ago(48))

    stats = store.get_stats(hours=24)

    assert stats.avg_temp == 21.17
    assert stats.min_temp == 20.0
    assert stats.max_temp == 22.5
    assert stats.avg_humidity == 58.33
    assert stats.min_humidity == 50.0
    assert stats.max_humidity == 65.0
    assert stats.avg_rainfall == 10.0
    assert stats.total_readings == 3
    assert stats.device_count == 2
    assert stats.hours == 24
    assert stats.device_id is None


def test_get_stats_rounds_halves_up(store, make_reading):
    store.add_reading(make_reading(temperature=20.0, humidity=40.0))
    store.add_reading(make_reading(temperature=20.25, humidity=40.25))

    stats = store.get_stats(hours=24)

    assert stats.avg_temp == 20.13
    assert stats.avg_humidity == 40.13
    assert stats.max_temp == 20.25


def test_get_stats_for_device(store, make_reading):
    store.add_reading(make_reading(temperature=20.0, device_id="roof"))
    store.add_reading(make_reading(temperature=30.0, device_id="garden"))

    stats = store.get_stats(hours=24, device_id="garden")

    assert stats.avg_temp == 30.0
    assert stats.total_readings == 1
    assert stats.device_count == 1
    assert stats.device_id == "garden"


def test_get_stats_empty_window(store):
    stats = store.get_stats(hours=24)

    assert stats.avg_temp is None
    assert stats.max_humidity is None
    assert stats.avg_rainfall is None
    assert stats.total_readings == 0
    assert stats.device_count == 0


def test_get_devices_most_recent_first(store, make_reading):
    store.add_reading(make_reading(device_id="roof"), recorded_at=hours_ago(10))
    store.add_reading(make_reading(device_id="roof"), recorded_at=hours_ago(8))
    store.add_reading(make_reading(device_id="garden"), recorded_at=hours_ago(1))

    devices = store.get_devices()

    assert [d.device_id for d in devices] == ["garden", "roof"]
    roof = devices[1]
    assert roof.reading_count == 2
    assert roof.first_seen < roof.last_seen


def test_closed_store_raises_storage_error(store, make_reading):
    store.close()

    with pytest.raises(StorageError):
        store.count_readings()
    with pytest.raises(StorageError):
        store.add_reading(make_reading())
