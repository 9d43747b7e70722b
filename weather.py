"""
Current conditions from the OpenWeather One Call API.

Without a usable API key the fetcher hands back simulated readings so the
rest of the pipeline can still be exercised.
"""
import logging
import random
from typing import Optional, Protocol

import requests

from config import OPENWEATHER_URL, PLACEHOLDER_API_KEYS, REQUEST_TIMEOUT_SECONDS
from errors import (
    DecodeError, RateLimited, ServerError, Unauthorized, WeatherNetworkError, WeatherTimeout,
)
from models import Coordinate, WeatherReading

logger = logging.getLogger(__name__)

# (condition name, description) pairs used for simulated readings
SIMULATED_CONDITIONS = [
    ("Clear", "clear sky"),
    ("Clouds", "broken clouds"),
    ("Rain", "light rain"),
    ("Thunderstorm", "thunderstorm with rain"),
    ("Rain", "heavy rain"),
]


class WeatherFetcher(Protocol):
    def fetch_current(self, coord: Coordinate) -> WeatherReading:
        ...


class OpenWeatherFetcher:
    def __init__(self, api_key: Optional[str], url: str = OPENWEATHER_URL,
                 timeout: float = REQUEST_TIMEOUT_SECONDS, rng: Optional[random.Random] = None):
        self.api_key = (api_key or "").strip()
        self.url = url
        self.timeout = timeout
        self.rng = rng or random.Random()

    @property
    def simulated(self) -> bool:
        return self.api_key in PLACEHOLDER_API_KEYS

    def fetch_current(self, coord: Coordinate) -> WeatherReading:
        if self.simulated:
            return self._simulated_reading()

        params = {
            "lat": coord.lat,
            "lon": coord.lon,
            "exclude": "minutely,alerts",
            "units": "imperial",
            "appid": self.api_key,
        }

        try:
            r = requests.get(self.url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise WeatherTimeout(f"Weather request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise WeatherNetworkError(str(e)) from e

        logger.info("Weather API response %s for %s", r.status_code, coord.tuple_latlon)
        if r.status_code == 401:
            raise Unauthorized("OpenWeather rejected the API key", status_code=401)
        if r.status_code == 429:
            raise RateLimited("OpenWeather rate limit reached", status_code=429)
        if r.status_code != 200:
            raise ServerError(f"OpenWeather returned HTTP {r.status_code}", status_code=r.status_code)

        try:
            return parse_current(r.json())
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from OpenWeather: {e}") from e

    def _simulated_reading(self) -> WeatherReading:
        condition, description = self.rng.choice(SIMULATED_CONDITIONS)
        return WeatherReading(
            condition_name=condition,
            description=description,
            temperature_f=float(self.rng.randint(50, 85)),
            simulated=True,
        )


def parse_current(payload) -> WeatherReading:
    try:
        current = payload["current"]
        temp = float(current["temp"])
        conditions = current["weather"]
        first = conditions[0] if conditions else {}
        return WeatherReading(
            condition_name=str(first.get("main") or "Unknown"),
            description=str(first.get("description") or ""),
            temperature_f=temp,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f"Unexpected OpenWeather payload: {e!r}") from e
