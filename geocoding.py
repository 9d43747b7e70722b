"""
Place name -> coordinate lookups through Nominatim.
"""
import logging
import time
from typing import Protocol

import requests

from config import NOMINATIM_PAUSE_SECONDS, NOMINATIM_URL, REQUEST_TIMEOUT_SECONDS, USER_AGENT
from errors import NetworkError, NotFound, RequestTimeout
from models import Coordinate

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def geocode(self, text: str) -> Coordinate:
        ...


class NominatimGeocoder:
    def __init__(self, url: str = NOMINATIM_URL, timeout: float = REQUEST_TIMEOUT_SECONDS,
                 pause_seconds: float = NOMINATIM_PAUSE_SECONDS):
        self.url = url
        self.timeout = timeout
        self.pause_seconds = pause_seconds

    def geocode(self, text: str) -> Coordinate:
        params = {"q": text, "format": "jsonv2", "limit": 1}
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}

        logger.info("Geocoding %r", text)
        try:
            r = requests.get(self.url, params=params, headers=headers, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.Timeout as e:
            raise RequestTimeout(f"Geocoding timed out for: {text}") from e
        except (requests.RequestException, ValueError) as e:
            raise NetworkError(f"Geocoding failed for {text}: {e}") from e
        finally:
            # only sleep on real Nominatim calls
            if self.pause_seconds:
                time.sleep(self.pause_seconds)

        if not data:
            raise NotFound(f"Could not find location: {text}")
        try:
            return Coordinate(float(data[0]["lat"]), float(data[0]["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise NotFound(f"Could not find location: {text}") from e
