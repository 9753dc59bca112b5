import asyncio
import json
import random

import httpx

from weather_logger.main import app
from weather_logger.routers import set_reading_store
from weather_logger.simulator import StationSimulator, parse_args


def make_simulator(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StationSimulator("http://station.test/", http_client=client, rng=random.Random(42), **kwargs)


def test_generate_reading_stays_in_range():
    simulator = StationSimulator("http://station.test", device_id="garden", rng=random.Random(1))

    for _ in range(500):
        reading = simulator.generate_reading()
        assert -40.0 <= reading["temperature"] <= 80.0
        assert 0.0 <= reading["humidity"] <= 100.0
        assert 0 <= reading["rainfall"] <= 100
        assert isinstance(reading["rainfall"], int)
        assert reading["light_level"] in ("Bright", "Dark")
        assert reading["device_id"] == "garden"
        assert "pressure" in reading


def test_run_posts_readings():
    posted = []

    def handler(request):
        assert request.url.path == "/api/data"
        posted.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "id": len(posted)})

    async def scenario():
        simulator = make_simulator(handler, device_id="roof")
        try:
            return await simulator.run(count=3, interval=0)
        finally:
            await simulator.close()

    assert asyncio.run(scenario()) == 3
    assert len(posted) == 3
    assert all(p["device_id"] == "roof" for p in posted)


def test_run_keeps_going_after_rejections():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 2:
            return httpx.Response(400, json={"detail": "Invalid temperature"})
        return httpx.Response(200, json={"success": True, "id": len(calls)})

    async def scenario():
        simulator = make_simulator(handler)
        try:
            return await simulator.run(count=3, interval=0)
        finally:
            await simulator.close()

    assert asyncio.run(scenario()) == 2
    assert len(calls) == 3


def test_check_health():
    def healthy(request):
        return httpx.Response(200, json={"status": "OK", "total_records": 5})

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario(handler):
        simulator = make_simulator(handler)
        try:
            return await simulator.check_health()
        finally:
            await simulator.close()

    assert asyncio.run(scenario(healthy)) is True
    assert asyncio.run(scenario(unreachable)) is False


def test_simulator_against_app(store):
    set_reading_store(store)

    async def scenario():
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        simulator = StationSimulator("http://logger.test", device_id="sim_01", http_client=client)
        try:
            return await simulator.run(count=2, interval=0)
        finally:
            await simulator.close()

    try:
        assert asyncio.run(scenario()) == 2
    finally:
        set_reading_store(None)

    assert store.count_readings() == 2
    assert store.get_latest().device_id == "sim_01"


def test_parse_args_defaults():
    args = parse_args([])

    assert args.url == "http://localhost:3022"
    assert args.device_id == "weather_station_01"
    assert args.interval == 30.0
    assert args.count == 0
