"""
Weather Station Simulator
=========================

A fake weather station for when the real one is on your desk in pieces.

WHAT THIS DOES:
--------------
1. Checks the backend is up (GET /health)
2. Makes up a believable reading (temperature, humidity, rain, light)
3. POSTs it to /api/data, exactly like the station firmware does
4. Waits, then does it again

The values drift a little each cycle instead of jumping around, so the
dashboard charts look like real weather.

HOW TO USE:
----------
    weather-station-sim --url http://localhost:3022 --interval 5 --count 20

    # Pretend to be a second station
    weather-station-sim --device-id garden_station --interval 10
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import Optional

import httpx

from weather_logger.models import DEFAULT_DEVICE_ID

logger = logging.getLogger(__name__)


class StationSimulator:
    """
    Plays the role of one weather station.

    HOW TO USE:
    ----------
    simulator = StationSimulator("http://localhost:3022", device_id="garden_station")
    await simulator.check_health()
    result = await simulator.send_reading()
    await simulator.close()
    """

    def __init__(
        self,
        base_url: str,
        device_id: str = DEFAULT_DEVICE_ID,
        request_timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Set up the simulator.

        Args:
            base_url: Where the backend lives (like "http://localhost:3022")
            device_id: Which station we pretend to be
            request_timeout: Same 10 second timeout the firmware uses
            http_client: Bring your own client (tests pass a mock transport)
            rng: Random source (pass a seeded one for repeatable readings)
        """
        self.base_url = base_url.rstrip("/")
        self.device_id = device_id
        self.http_client = http_client or httpx.AsyncClient(timeout=request_timeout)
        self.rng = rng or random.Random()

        # Starting point for the drift
        self._temperature = 22.0
        self._humidity = 55.0
        self._rain = 0
        self._pressure = 1013.0


    def generate_reading(self) -> dict:
        """
        Make up the next reading.

        Returns the same JSON the firmware sends, pressure included
        (the backend ignores it).
        """
        self._temperature = min(max(self._temperature + self.rng.uniform(-0.5, 0.5), -40.0), 80.0)
        self._humidity = min(max(self._humidity + self.rng.uniform(-2.0, 2.0), 0.0), 100.0)
        self._rain = min(max(self._rain + self.rng.randint(-5, 5), 0), 100)
        self._pressure += self.rng.uniform(-0.3, 0.3)

        return {
            "temperature": round(self._temperature, 1),
            "humidity": round(self._humidity, 1),
            "rainfall": self._rain,
            "pressure": round(self._pressure, 1),
            "light_level": self.rng.choice(["Bright", "Dark"]),
            "device_id": self.device_id,
        }


    async def check_health(self) -> bool:
        """Ask the backend if it's up. Never raises."""
        try:
            response = await self.http_client.get(f"{self.base_url}/health")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Health check failed: {e}")
            return False

        logger.info(f"Backend healthy: {response.json().get('total_records')} readings stored")
        return True


    async def send_reading(self, reading: Optional[dict] = None) -> dict:
        """
        POST one reading to /api/data.

        Raises:
            httpx.HTTPError: connection problems or a non-2xx response
        """
        reading = reading or self.generate_reading()
        response = await self.http_client.post(f"{self.base_url}/api/data", json=reading)
        response.raise_for_status()
        return response.json()


    async def run(self, count: int = 0, interval: float = 30.0) -> int:
        """
        Send readings on a timer.

        Args:
            count: How many readings to send (0 = keep going forever)
            interval: Seconds between readings

        Returns:
            How many readings were accepted
        """
        sent = 0
        attempt = 0

        while count == 0 or attempt < count:
            attempt += 1
            reading = self.generate_reading()
            try:
                result = await self.send_reading(reading)
                sent += 1
                logger.info(
                    f"[{self.device_id}] #{result.get('id')} "
                    f"T:{reading['temperature']}°C H:{reading['humidity']}% "
                    f"R:{reading['rainfall']}% L:{reading['light_level']}"
                )
            except httpx.HTTPStatusError as e:
                logger.error(f"[{self.device_id}] Upload rejected: HTTP {e.response.status_code} {e.response.text[:200]}")
            except httpx.HTTPError as e:
                logger.error(f"[{self.device_id}] Upload failed: {e}")

            if count == 0 or attempt < count:
                await asyncio.sleep(interval)

        return sent


    async def close(self):
        """Close the HTTP client."""
        await self.http_client.aclose()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Post fake weather station readings to the logger backend.")
    parser.add_argument("--url", default="http://localhost:3022", help="Backend base URL")
    parser.add_argument("--device-id", default=DEFAULT_DEVICE_ID, help="Station ID to report as")
    parser.add_argument("--interval", type=float, default=30.0, help="Seconds between readings")
    parser.add_argument("--count", type=int, default=0, help="Readings to send (0 = forever)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable readings")
    return parser.parse_args(argv)


async def _main(args) -> int:
    simulator = StationSimulator(args.url, device_id=args.device_id, rng=random.Random(args.seed))
    try:
        if not await simulator.check_health():
            logger.warning("Backend not reachable yet - sending anyway")
        sent = await simulator.run(count=args.count, interval=args.interval)
    finally:
        await simulator.close()
    logger.info(f"Done: {sent} readings accepted")
    return 0 if sent else 1


def main(argv=None):
    """Console entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='[%(asctime)s] %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    args = parse_args(argv)
    try:
        return asyncio.run(_main(args))
    except KeyboardInterrupt:
        logger.info("Stopped")
        return 0


if __name__ == "__main__":
    sys.exit(main())
